"""
Record store backends holding the posted listings.
Supports an in-memory channel, a Postgres table, and a Discord channel.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

import psycopg2
import requests
from psycopg2.extras import Json, RealDictCursor

from inventory_sync.config import SyncConfig
from inventory_sync.errors import OperationFailure, StoreReadFailure
from inventory_sync.models import Record
from inventory_sync.render import content_from_embed

logger = logging.getLogger(__name__)


def record_from_embeds(handle, embeds) -> Record:
    """Build a Record from a message's embed list (first embed wins)."""
    content = content_from_embed(embeds[0]) if embeds else None
    return Record(handle=str(handle), content=content)


class RecordStore(ABC):
    """Abstract base class for record store backends."""

    @abstractmethod
    def list_records(self, limit: int) -> list[Record]:
        """
        List the most recent messages, newest first.

        Args:
            limit: Maximum number of messages to return

        Returns:
            Records in a stable order; messages without an embed come back
            with content None

        Raises:
            StoreReadFailure: the store could not be read
        """
        pass

    @abstractmethod
    def create(self, embed: dict) -> Record:
        """Post a new listing message. Raises OperationFailure."""
        pass

    @abstractmethod
    def update(self, handle: str, embed: dict) -> Record:
        """Replace the embed of an existing message in place. Raises OperationFailure."""
        pass

    @abstractmethod
    def delete(self, handle: str) -> None:
        """Remove a message. Raises OperationFailure."""
        pass

    @abstractmethod
    def post_message(self, text: str) -> str:
        """Post a plain text message and return its handle."""
        pass

    @abstractmethod
    def bulk_delete(self, limit: int) -> int:
        """Delete the most recent `limit` messages and return how many went."""
        pass


class InMemoryRecordStore(RecordStore):
    """Process-local channel, newest message first."""

    def __init__(self):
        self._messages = []
        self._next_id = 1

    @property
    def messages(self) -> list[dict]:
        return list(self._messages)

    def _new_handle(self) -> str:
        handle = str(self._next_id)
        self._next_id += 1
        return handle

    def _find(self, handle: str) -> dict:
        for message in self._messages:
            if message['id'] == handle:
                return message
        raise OperationFailure(f'Unknown message {handle}')

    def list_records(self, limit: int) -> list[Record]:
        return [
            record_from_embeds(message['id'], message['embeds'])
            for message in self._messages[:limit]
        ]

    def create(self, embed: dict) -> Record:
        message = {'id': self._new_handle(), 'content': None, 'embeds': [embed]}
        self._messages.insert(0, message)
        return record_from_embeds(message['id'], message['embeds'])

    def update(self, handle: str, embed: dict) -> Record:
        message = self._find(handle)
        message['embeds'] = [embed]
        return record_from_embeds(handle, message['embeds'])

    def delete(self, handle: str) -> None:
        self._messages.remove(self._find(handle))

    def post_message(self, text: str) -> str:
        message = {'id': self._new_handle(), 'content': text, 'embeds': []}
        self._messages.insert(0, message)
        return message['id']

    def bulk_delete(self, limit: int) -> int:
        removed = self._messages[:limit]
        del self._messages[:limit]
        return len(removed)


class PostgresRecordStore(RecordStore):
    """
    Channel stored as rows of a Postgres table.
    Embeds live in a JSONB column; ordering is newest first.
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS channel_messages (
            id BIGSERIAL PRIMARY KEY,
            channel_id TEXT NOT NULL,
            content TEXT,
            embed JSONB,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            edited_at TIMESTAMPTZ
        )
    """

    def __init__(self, database_url: str, channel_id: str = 'default'):
        self.database_url = database_url
        self.channel_id = channel_id
        self.conn = None

    def _get_connection(self):
        """Lazily open the database connection."""
        if self.conn is None or self.conn.closed:
            self.conn = psycopg2.connect(self.database_url)
        return self.conn

    def close(self):
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def ensure_schema(self):
        """Create the messages table if it does not exist."""
        try:
            conn = self._get_connection()
            with conn.cursor() as cur:
                cur.execute(self.SCHEMA)
            conn.commit()
        except psycopg2.Error as e:
            raise StoreReadFailure(f'Failed to prepare messages table: {e}') from e

    def _write(self, sql, params, failure_msg):
        """Run a single-row write and return the affected id."""
        try:
            conn = self._get_connection()
            with conn.cursor() as cur:
                cur.execute(sql, params)
                row = cur.fetchone()
            conn.commit()
        except psycopg2.Error as e:
            if self.conn is not None and not self.conn.closed:
                self.conn.rollback()
            raise OperationFailure(f'{failure_msg}: {e}') from e
        if row is None:
            raise OperationFailure(f'{failure_msg}: message not found')
        return row[0]

    def list_records(self, limit: int) -> list[Record]:
        try:
            conn = self._get_connection()
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(
                    """
                    SELECT id, embed FROM channel_messages
                    WHERE channel_id = %s
                    ORDER BY created_at DESC, id DESC
                    LIMIT %s
                    """,
                    (self.channel_id, limit)
                )
                rows = cur.fetchall()
        except psycopg2.Error as e:
            raise StoreReadFailure(f'Failed to list messages: {e}') from e
        return [
            record_from_embeds(row['id'], [row['embed']] if row['embed'] else [])
            for row in rows
        ]

    def create(self, embed: dict) -> Record:
        message_id = self._write(
            """
            INSERT INTO channel_messages (channel_id, embed)
            VALUES (%s, %s)
            RETURNING id
            """,
            (self.channel_id, Json(embed)),
            'Failed to create message',
        )
        return record_from_embeds(message_id, [embed])

    def update(self, handle: str, embed: dict) -> Record:
        message_id = self._write(
            """
            UPDATE channel_messages
            SET embed = %s, edited_at = now()
            WHERE id = %s AND channel_id = %s
            RETURNING id
            """,
            (Json(embed), int(handle), self.channel_id),
            f'Failed to update message {handle}',
        )
        return record_from_embeds(message_id, [embed])

    def delete(self, handle: str) -> None:
        self._write(
            """
            DELETE FROM channel_messages
            WHERE id = %s AND channel_id = %s
            RETURNING id
            """,
            (int(handle), self.channel_id),
            f'Failed to delete message {handle}',
        )

    def post_message(self, text: str) -> str:
        message_id = self._write(
            """
            INSERT INTO channel_messages (channel_id, content)
            VALUES (%s, %s)
            RETURNING id
            """,
            (self.channel_id, text),
            'Failed to post message',
        )
        return str(message_id)

    def bulk_delete(self, limit: int) -> int:
        try:
            conn = self._get_connection()
            with conn.cursor() as cur:
                cur.execute(
                    """
                    DELETE FROM channel_messages
                    WHERE id IN (
                        SELECT id FROM channel_messages
                        WHERE channel_id = %s
                        ORDER BY created_at DESC, id DESC
                        LIMIT %s
                    )
                    """,
                    (self.channel_id, limit)
                )
                deleted = cur.rowcount
            conn.commit()
        except psycopg2.Error as e:
            if self.conn is not None and not self.conn.closed:
                self.conn.rollback()
            raise OperationFailure(f'Failed to bulk delete messages: {e}') from e
        return deleted


class DiscordChannelStore(RecordStore):
    """Discord text channel accessed through the bot REST API."""

    API_BASE = 'https://discord.com/api/v10'
    MAX_FETCH = 100  # Discord caps message fetches at 100

    def __init__(self, channel_id: str, token: str, timeout: int = 10, session=None):
        self.channel_id = channel_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bot {token}',
            'Content-Type': 'application/json',
        })

    def _request(self, method: str, path: str, **kwargs):
        url = f'{self.API_BASE}/channels/{self.channel_id}{path}'
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return response

    def _fetch_messages(self, limit: int) -> list[dict]:
        if limit > self.MAX_FETCH:
            logger.warning(f'Requested {limit} messages, Discord returns at most {self.MAX_FETCH}')
            limit = self.MAX_FETCH
        return self._request('GET', '/messages', params={'limit': limit}).json()

    def list_records(self, limit: int) -> list[Record]:
        try:
            messages = self._fetch_messages(limit)
        except requests.RequestException as e:
            raise StoreReadFailure(f'Failed to fetch channel messages: {e}') from e
        return [record_from_embeds(msg['id'], msg.get('embeds') or []) for msg in messages]

    def create(self, embed: dict) -> Record:
        try:
            message = self._request('POST', '/messages', json={'embeds': [embed]}).json()
        except requests.RequestException as e:
            raise OperationFailure(f'Failed to send message: {e}') from e
        return record_from_embeds(message['id'], message.get('embeds') or [embed])

    def update(self, handle: str, embed: dict) -> Record:
        try:
            message = self._request('PATCH', f'/messages/{handle}', json={'embeds': [embed]}).json()
        except requests.RequestException as e:
            raise OperationFailure(f'Failed to edit message {handle}: {e}') from e
        return record_from_embeds(handle, message.get('embeds') or [embed])

    def delete(self, handle: str) -> None:
        try:
            self._request('DELETE', f'/messages/{handle}')
        except requests.RequestException as e:
            raise OperationFailure(f'Failed to delete message {handle}: {e}') from e

    def post_message(self, text: str) -> str:
        try:
            message = self._request('POST', '/messages', json={'content': text}).json()
        except requests.RequestException as e:
            raise OperationFailure(f'Failed to send message: {e}') from e
        return message['id']

    def bulk_delete(self, limit: int) -> int:
        try:
            ids = [msg['id'] for msg in self._fetch_messages(limit)]
            if len(ids) == 1:
                self._request('DELETE', f'/messages/{ids[0]}')
            elif ids:
                # bulk-delete takes 2-100 ids
                self._request('POST', '/messages/bulk-delete', json={'messages': ids})
        except requests.RequestException as e:
            raise OperationFailure(f'Failed to bulk delete messages: {e}') from e
        return len(ids)


def get_record_store(config: Optional[SyncConfig] = None) -> RecordStore:
    """
    Factory function to get the configured record store backend.
    Reads config.store_type:
    - 'memory' (default): process-local store
    - 'postgres': needs DATABASE_URL, uses CHANNEL_ID if set
    - 'discord': needs CHANNEL_ID and CLIENT_TOKEN
    """
    config = config or SyncConfig.from_env()
    store_type = config.store_type

    if store_type == 'postgres':
        if not config.database_url:
            raise ValueError('Postgres record store requires DATABASE_URL')
        store = PostgresRecordStore(config.database_url, config.channel_id or 'default')
        store.ensure_schema()
        return store

    if store_type == 'discord':
        if not all([config.channel_id, config.client_token]):
            raise ValueError('Discord record store requires: CHANNEL_ID, CLIENT_TOKEN')
        return DiscordChannelStore(config.channel_id, config.client_token)

    if store_type == 'memory':
        return InMemoryRecordStore()

    raise ValueError(f'Unknown record store type: {store_type}')
