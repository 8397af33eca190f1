"""Credential Vault Meta information.
   Credential Vault stores salted, key-derived account credentials
   and drills the user on remembering them.
"""
__title__ = 'credential_vault'
__description__ = (
   'Credential Vault stores salted, key-derived account credentials '
   'and drills the user on remembering them.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
