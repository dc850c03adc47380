"""
Account Store
=============

Flat-file store for Klaviyo account records.

The whole collection lives in one JSON file as an array of records. Every
mutating call reloads the file, changes the in-memory list and rewrites the
whole file. There is no lock: two processes writing at once means the last
write wins.
"""

import json
import logging
import os
import tempfile
import uuid

from .errors import NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

# Fields that must be present and non-empty when an account is created
REQUIRED_FIELDS = ('name', 'apiKey')


class AccountStore:
    """JSON file backed account collection"""

    def __init__(self, path):
        self.path = path
        self._accounts = []

    def reload(self):
        """Read the backing file into memory. A missing or empty file is an empty collection."""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = f.read()
        except FileNotFoundError:
            self._accounts = []
            return self._accounts
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading accounts file {self.path}: {e}")
            raise PersistenceError('Failed to read accounts file.') from e

        if not data.strip():
            self._accounts = []
            return self._accounts

        try:
            accounts = json.loads(data)
        except ValueError as e:
            logger.error(f"Accounts file {self.path} is not valid JSON: {e}")
            raise PersistenceError('Failed to read accounts file.') from e

        if not isinstance(accounts, list) or not all(isinstance(a, dict) for a in accounts):
            logger.error(f"Accounts file {self.path} does not hold a list of accounts")
            raise PersistenceError('Failed to read accounts file.')

        self._accounts = accounts
        return self._accounts

    def persist(self, accounts=None):
        """Write the full collection. Goes through a temp file so readers never see half a file."""
        if accounts is not None:
            self._accounts = accounts

        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix='.accounts-', suffix='.tmp', dir=directory)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(self._accounts, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Error writing accounts file {self.path}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceError('Failed to write accounts file.') from e

    # ===== Operations =====

    def list_accounts(self):
        return list(self.reload())

    def get_account(self, account_id):
        for account in self.reload():
            if account.get('id') == account_id:
                return account
        raise NotFoundError()

    def create_account(self, record):
        """
        Append a new account and persist the collection.

        The client may choose the id (the UI sends a UUID); one is generated
        when it is missing. An id that is already taken is rejected.
        """
        if not isinstance(record, dict):
            raise ValidationError('Account must be a JSON object')
        for field in REQUIRED_FIELDS:
            if not record.get(field):
                raise ValidationError(f'{field} is required')

        record = dict(record)
        if not record.get('id'):
            record['id'] = str(uuid.uuid4())
        elif not isinstance(record['id'], str):
            raise ValidationError('id must be a string')

        accounts = self.reload()
        if any(account.get('id') == record['id'] for account in accounts):
            raise ValidationError(f"Account id {record['id']} already exists")

        accounts.append(record)
        self.persist(accounts)
        logger.info(f"Account created: {record['id']} ({record.get('name')})")
        return record

    def update_account(self, account_id, fields):
        """Shallow-merge fields into an account. The id itself cannot be changed."""
        if not isinstance(fields, dict):
            raise ValidationError('Account update must be a JSON object')
        fields = {k: v for k, v in fields.items() if k != 'id'}
        if 'apiKey' in fields and not fields['apiKey']:
            raise ValidationError('apiKey cannot be empty')

        accounts = self.reload()
        for index, account in enumerate(accounts):
            if account.get('id') == account_id:
                merged = {**account, **fields}
                accounts[index] = merged
                self.persist(accounts)
                logger.info(f"Account updated: {account_id} (fields: {', '.join(sorted(fields))})")
                return merged

        raise NotFoundError()

    def delete_account(self, account_id):
        """Remove an account. Deleting an unknown id is a no-op."""
        accounts = self.reload()
        remaining = [account for account in accounts if account.get('id') != account_id]
        if len(remaining) == len(accounts):
            logger.info(f"Delete requested for unknown account {account_id}, nothing to do")
            return
        self.persist(remaining)
        logger.info(f"Account deleted: {account_id}")
