#!/usr/bin/env python3
"""
Database reset script: drops every table, recreates the schema and loads demo data
Usage: python reset_data.py
"""

import os
import sys
from classbook import create_app
from config import config
from classbook.seed import reset_and_seed

def reset_database():
    """Reset the entire database"""
    app = create_app(config[os.environ.get('FLASK_CONFIG') or 'default'])

    with app.app_context():
        print("Starting database reset...")
        try:
            summary = reset_and_seed()
        except Exception as e:
            app.logger.error(f"Database reset failed: {e}")
            print(f"Error during database reset: {str(e)}")
            sys.exit(1)

        print("Database reset completed successfully")
        for name, count in summary.items():
            print(f"  {name}: {count}")

if __name__ == '__main__':
    confirm = input("This deletes ALL data. Continue? (yes/no): ")
    if confirm.lower() == 'yes':
        reset_database()
    else:
        print("Database reset cancelled")
