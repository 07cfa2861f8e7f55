# Repositories package init
"""
Pikecape Backend - Repository Layer
====================================

What:  Data-access classes that translate resource operations into
       document-store queries.

Repository Inventory:
    - DuckRepository: CRUD over the `duck` collection

Repositories receive their collection handle from the caller (see
database.py) and take only plain values, never HTTP objects.
"""
