# gunicorn payroll_api.wsgi:app
from payroll_api import create_app

app = create_app()
