# Package marker
from setukpa.db.base import Base  # noqa
