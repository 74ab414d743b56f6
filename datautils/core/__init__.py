"""
CORE LAYER CONTRACT

This package contains the data access core of datautils.

RULES:
- BatchQuery and Importer talk to the database only through a data helper
- Data helpers hide psycopg2; driver errors never leave this layer unwrapped
- No configuration loading and no logging setup here

LAYER RESPONSIBILITY:
- Exception hierarchy
- Data helper protocols and the psycopg2 implementation
- Tabular model (DataTable / Row)
- Command sequencer (BatchQuery) and copy pipeline (Importer)

CROSS-LAYER RESTRICTIONS:
- May import datautils.config for connection settings
- No imports from datautils.services or datautils.main
"""
