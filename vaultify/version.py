"""Vaultify Meta information.
   Vaultify stores user secrets encrypted at rest inside shareable vaults.
"""
__title__ = 'vaultify'
__description__ = (
   'Vaultify stores user secrets encrypted at rest inside '
   'shareable vaults.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2024 Vaultify'
__author__ = 'Vaultify Team'
__author_email__ = 'dev@vaultify.io'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/vaultify/vaultify-core'
