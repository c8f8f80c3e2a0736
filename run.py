import os
from classbook import create_app, db
from config import config
from classbook.models import (
    Teacher, Student, Course, ClassSession, Enrollment, Meeting,
    AttendanceRecord, TeacherPresenceRecord, Payment, PaymentTransaction
)

# Create Flask application instance
app = create_app(config[os.environ.get('FLASK_CONFIG') or 'default'])

@app.shell_context_processor
def make_shell_context():
    return {
        'db': db,
        'Teacher': Teacher,
        'Student': Student,
        'Course': Course,
        'ClassSession': ClassSession,
        'Enrollment': Enrollment,
        'Meeting': Meeting,
        'AttendanceRecord': AttendanceRecord,
        'TeacherPresenceRecord': TeacherPresenceRecord,
        'Payment': Payment,
        'PaymentTransaction': PaymentTransaction
    }

def initialize_database():
    """Create tables if they do not exist yet"""
    with app.app_context():
        db.create_all()
        app.logger.info("Database tables ready")

def display_config_info():
    """Display important configuration information"""
    print("=" * 60)
    print(f"{app.config.get('APP_NAME')} - Configuration")
    print("=" * 60)
    print(f"Database: {app.config.get('SQLALCHEMY_DATABASE_URI', 'SQLite')[:50]}...")
    print(f"Timezone: {app.config.get('TIMEZONE')}")
    print(f"Debug Mode: {app.config.get('DEBUG', False)}")
    print("=" * 60)

if __name__ == '__main__':
    display_config_info()
    initialize_database()
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000, threaded=True)
