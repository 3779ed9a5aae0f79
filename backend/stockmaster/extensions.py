# Overview: Flask extension instances for the store handle and schema migrations.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Bound to an app in create_app(); services reach the store only through db.session.
db = SQLAlchemy()
migrate = Migrate()
