"""Library for reading compiled TZif time zone files and TZ rule strings."""
