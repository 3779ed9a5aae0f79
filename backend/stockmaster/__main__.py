# Run the API with Flask's development server: python -m stockmaster
from . import create_app

app = create_app()
app.run(host="0.0.0.0", port=app.config["PORT"], debug=app.config["APP_ENV"] == "development")
