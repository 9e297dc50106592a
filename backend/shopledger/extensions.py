# Overview: Flask extension instances for the ledger database and its migrations.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()

# SQLite cannot ALTER constraints in place; autogenerated revisions use batch mode
migrate = Migrate(render_as_batch=True, compare_type=True)
