"""Contact and profile data classes"""

from dataclasses import dataclass
from typing import Dict


@dataclass
class Contact:
    """A saved name for a phone number"""
    phone: str
    name: str

    def __post_init__(self):
        """Validate contact data after initialization"""
        self.phone = (self.phone or "").strip()
        self.name = (self.name or "").strip()
        if not self.phone:
            raise ValueError("phone is required")
        if not self.name:
            raise ValueError("name is required")

    def to_dict(self) -> Dict[str, str]:
        return {"phone": self.phone, "name": self.name}

    def __str__(self) -> str:
        return f"{self.name} ({self.phone})"


@dataclass
class Profile:
    """The inbox owner's own name and number"""
    name: str
    phone: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "phone": self.phone}
