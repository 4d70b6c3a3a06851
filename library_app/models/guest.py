"""
Guest model for unauthenticated users.
Implements Null Object Pattern with Falsy evaluation.
"""


class Guest:
    def __init__(self):
        self.id = None
        self.username = 'Guest'
        self.role = 'guest'

    def is_admin(self):
        return False

    def can_borrow(self):
        return False

    def __bool__(self):
        """Lets templates write ``{% if current_user %}`` to show login links."""
        return False
