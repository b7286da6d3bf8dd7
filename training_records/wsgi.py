# training_records/wsgi.py
import os
from django.core.wsgi import get_wsgi_application

# Set default settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'training_records.settings')

# Get WSGI application
application = get_wsgi_application()
