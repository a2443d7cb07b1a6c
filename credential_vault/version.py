"""Credential Vault Meta information.
   Credential Vault keeps user credentials encrypted at rest and
   generates strong passwords.
"""
__title__ = 'credential_vault'
__description__ = (
   'Credential Vault keeps user credentials encrypted at rest '
   'and generates strong passwords.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2024 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/credential-vault'
