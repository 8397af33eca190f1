"""
Command line interface — interactive menu over a CredentialVault.

Loads the vault (or creates one), asks for the master password, lets the
user add, edit and remove accounts or train on their passwords, and saves
the vault once on exit.
"""
import logging
from pathlib import Path
from typing import Callable, Optional

import click

from .version import __version__
from .vault import (
    CredentialVault,
    VaultConfig,
    VaultError,
    InvalidConfig,
    VaultFormatError,
    load_vault,
    save_vault,
)

logger = logging.getLogger("credential_vault.cli")

ADD = "Add a new account"
EDIT = "Edit an existing account"
REMOVE = "Remove an account"
TRAIN = "Train passwords"
EXIT = "Exit"


class CancelMasterPassword(click.ClickException):
    """The user left the master password prompt empty."""

    exit_code = 1

    def __init__(self):
        super().__init__("Master password prompt cancelled, nothing was saved")


def _prompt_secret(text: str, allow_empty: bool = False, confirm: bool = False) -> str:
    return click.prompt(
        text,
        hide_input=True,
        default="" if allow_empty else None,
        show_default=False,
        confirmation_prompt=confirm,
    )


def _prompt_account() -> str:
    return click.prompt("Account name")


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------

def unlock(vault: CredentialVault) -> CredentialVault:
    """Ask for the master password until the user accepts its fingerprint.

    Raises:
        CancelMasterPassword: If the user enters an empty master password.
    """
    while True:
        master = _prompt_secret(
            "Master password (leave empty to abort)", allow_empty=True,
        )
        if not master:
            raise CancelMasterPassword()
        vault.set_master_password(master)
        if click.confirm(
            f"Does {vault.fingerprint_master_password()} look familiar?",
            default=True,
        ):
            return vault


def create(config: VaultConfig) -> CredentialVault:
    """Create a new vault and set its master password."""
    click.echo("Creating a storage file for you")
    master = _prompt_secret("Set master password", confirm=True)
    vault = CredentialVault.create(config.iterations)
    vault.set_master_password(master)
    click.echo(f"{vault.fingerprint_master_password()} is your check")
    return vault


def load_or_create(config: VaultConfig) -> CredentialVault:
    vault = load_vault(config.store_file)
    if vault is None:
        return create(config)
    return unlock(vault)


# ---------------------------------------------------------------------------
# Menu actions
# ---------------------------------------------------------------------------

def add_account(vault: CredentialVault) -> None:
    account = _prompt_account()
    password = _prompt_secret("Password")
    vault.store_password(account, password)


def edit_account(vault: CredentialVault) -> None:
    account = _prompt_account()
    if not vault.contains(account):
        click.echo("This account does not exist")
        return
    password = _prompt_secret("Password")
    vault.store_password(account, password)


def remove_account(vault: CredentialVault) -> None:
    vault.remove_password(_prompt_account())


def train(vault: CredentialVault) -> None:
    """Drill random accounts until the user enters an empty password."""
    while True:
        account = vault.sample_random_account()
        if account is None:
            return
        while True:
            password = _prompt_secret(
                f"Password for {account} (leave empty to abort)",
                allow_empty=True,
            )
            if not password:
                click.echo("Empty password, abort training")
                return
            try:
                vault.verify_password(account, password)
            except VaultError:
                # same message whichever password was wrong
                click.echo("Incorrect, please try again")
                continue
            click.echo("Good!")
            break


ACTIONS: dict[str, Callable[[CredentialVault], None]] = {
    ADD: add_account,
    EDIT: edit_account,
    REMOVE: remove_account,
    TRAIN: train,
}


def menu_choices(vault: CredentialVault) -> list[str]:
    choices = [ADD]
    if vault.count() > 0:
        choices += [EDIT, REMOVE, TRAIN]
    choices.append(EXIT)
    return choices


def default_choice(vault: CredentialVault, just_started: bool) -> str:
    if not just_started:
        return EXIT
    return TRAIN if vault.count() > 0 else ADD


def main_loop(vault: CredentialVault) -> None:
    just_started = True
    while True:
        choices = menu_choices(vault)
        default = default_choice(vault, just_started)
        just_started = False
        for idx, label in enumerate(choices, start=1):
            click.echo(f"  {idx}) {label}")
        selected = click.prompt(
            "What do you want to do?",
            type=click.IntRange(1, len(choices)),
            default=choices.index(default) + 1,
        )
        action = choices[selected - 1]
        if action == EXIT:
            return
        ACTIONS[action](vault)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--store",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Vault file (default: $VAULT_STORE_FILE or store.bin).",
)
@click.option(
    "--iterations",
    type=int,
    default=None,
    help="PBKDF2 iterations for a new vault (default: $VAULT_ITERATIONS or 10000).",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(__version__, prog_name="credential-vault")
def main(store: Optional[Path], iterations: Optional[int], verbose: bool) -> None:
    """Store password credentials and train yourself to remember them."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = VaultConfig.from_env(store_file=store, iterations=iterations)
    except InvalidConfig as err:
        raise click.UsageError(str(err)) from err

    try:
        vault = load_or_create(config)
    except (VaultFormatError, OSError) as err:
        raise click.ClickException(
            f"Could not read {config.store_file}: {err}"
        ) from err

    click.echo(f"Registered passwords: {vault.count()}")
    main_loop(vault)
    try:
        save_vault(vault, config.store_file)
    except OSError as err:
        raise click.ClickException(
            f"Could not write {config.store_file}: {err}"
        ) from err
    logger.debug("Session finished with %d account(s)", vault.count())
