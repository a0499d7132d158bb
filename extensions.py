# extensions.py

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Single source of truth for the db object.
# Bound to an app later in create_app().
db = SQLAlchemy()

# Schema migrations (flask db upgrade)
migrate = Migrate()
