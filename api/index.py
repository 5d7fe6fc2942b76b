import os
import sys

# Add the parent directory to sys.path to import src
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.settings import configure_logging
from src.api.app import app

configure_logging()

# Serverless hosts expect a variable named 'app'
