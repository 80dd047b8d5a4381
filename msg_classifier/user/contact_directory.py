"""Contact directory - resolves sender keys to display names"""

import threading
from typing import Dict, List, Optional

from msg_classifier.database.inbox_db import InboxDatabase
from msg_classifier.user.contact import Contact, Profile
from msg_classifier.utils.logger_config import get_logger

logger = get_logger(__name__)


def normalize_phone_number(phone: str) -> str:
    """
    Reduce a phone number to a comparable key

    Strips everything but digits and drops a leading US country code, so
    "+1 (555) 123-4567", "15551234567" and "555-123-4567" share one key.

    Args:
        phone: Raw phone number or sender string

    Returns:
        Digits-only key, or "" if the value holds no digits
    """
    if not phone:
        return ""

    digits = "".join(filter(str.isdigit, phone))

    # Remove US country code (1) if present and we have 11 digits
    if digits.startswith("1") and len(digits) == 11:
        digits = digits[1:]

    return digits


class ContactDirectory:
    """Phone number to display name lookup, optionally backed by the inbox database"""

    def __init__(self, database: Optional[InboxDatabase] = None):
        """
        Initialize the directory

        Args:
            database: Inbox database holding the contacts table; None keeps
                contacts in memory only
        """
        self.database = database
        self._lock = threading.Lock()
        self._by_phone: Dict[str, Contact] = {}
        self._by_key: Dict[str, Contact] = {}

        if self.database is not None:
            self.database.create_database()
            for row in self.database.get_all_contacts():
                try:
                    self._index(Contact(phone=row["phone"], name=row["name"]))
                except ValueError as e:
                    logger.warning(f"Skipping invalid contact row {row}: {e}")
            logger.info(f"Loaded {len(self._by_phone)} contacts")

    def _index(self, contact: Contact) -> None:
        self._by_phone[contact.phone] = contact
        key = normalize_phone_number(contact.phone)
        if key:
            self._by_key[key] = contact

    def _rebuild_keys(self) -> None:
        self._by_key = {}
        for contact in self._by_phone.values():
            key = normalize_phone_number(contact.phone)
            if key:
                self._by_key[key] = contact

    def resolve(self, sender: str) -> str:
        """
        Display name for a sender key

        Never fails: returns the sender unchanged when no contact matches.
        """
        with self._lock:
            contact = self._by_phone.get(sender)
            if contact is None:
                key = normalize_phone_number(sender)
                contact = self._by_key.get(key) if key else None
        return contact.name if contact else sender

    def add_contact(self, phone: str, name: str) -> Contact:
        """
        Save or rename a contact

        Raises:
            ValueError: If phone or name is blank
        """
        contact = Contact(phone=phone, name=name)
        with self._lock:
            self._by_phone[contact.phone] = contact
            self._rebuild_keys()
        if self.database is not None:
            self.database.upsert_contact(contact.phone, contact.name)
        logger.info(f"Saved contact {contact}")
        return contact

    def remove_contact(self, phone: str) -> bool:
        """
        Remove a contact by phone number

        Returns:
            True if the contact existed
        """
        with self._lock:
            removed = self._by_phone.pop(phone, None)
            self._rebuild_keys()
        if self.database is not None:
            self.database.delete_contact(phone)
        if removed:
            logger.info(f"Removed contact {removed}")
        return removed is not None

    def list_contacts(self) -> List[Contact]:
        with self._lock:
            return sorted(self._by_phone.values(), key=lambda c: c.name.lower())

    def get_profile(self) -> Profile:
        """The inbox owner's profile; defaults when no database is attached"""
        if self.database is None:
            return Profile(name="Me", phone="+1 (000) 000-0000")
        data = self.database.get_profile()
        return Profile(name=data["name"], phone=data["phone"])

    def update_profile(self, name: str, phone: str) -> Profile:
        """
        Update the inbox owner's profile

        Raises:
            ValueError: If name or phone is blank
        """
        name, phone = (name or "").strip(), (phone or "").strip()
        if not name or not phone:
            raise ValueError("Profile name and phone are required")
        if self.database is not None:
            self.database.update_profile(name, phone)
        return Profile(name=name, phone=phone)
