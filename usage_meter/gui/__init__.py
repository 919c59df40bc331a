"""Desktop shell for usage-meter (customtkinter)."""
