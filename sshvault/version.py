"""SSHVault Meta information.
   SSHVault exports and imports an SSH host store as a passphrase-protected archive.
"""
__title__ = 'sshvault'
__description__ = (
   'Encrypted export, import and merge of SSH host stores '
   'under a user passphrase.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2026 SSHVault Contributors'
__author__ = 'SSHVault Contributors'
__license__ = 'Apache-2.0'
