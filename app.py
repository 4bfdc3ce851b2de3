"""Development entry point: ``python app.py`` or ``flask --app app run``."""
from __future__ import annotations

from campus_attendance.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=bool(app.config.get("DEBUG", False)))
