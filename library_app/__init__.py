"""Library circulation web application.

Members borrow and return books; an admin maintains the catalog.
"""
