"""Auto-import all resource modules so their @registry.register decorators fire.

Import order is the sidebar order.
"""

from fleetdesk.core.resources import (  # noqa: F401
    buses,
    people,
    staff,
    reservations,
)
