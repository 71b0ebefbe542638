"""OurArchive Stats - daily public usage statistics over Firestore."""

__version__ = "0.1.0"
