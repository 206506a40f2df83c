"""Models, enums, exceptions and clients shared by all modules."""
