import os
from dotenv import load_dotenv

load_dotenv()

basedir = os.path.abspath(os.path.dirname(__file__))

class Config:
    """Base configuration class."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'payroll.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MIGRATION_DIR = os.path.join(basedir, 'migrations')

    # Payroll policy. Bump the version whenever a rate changes so past
    # results can be traced to the rules that produced them.
    PAYROLL_POLICY_VERSION = os.environ.get('PAYROLL_POLICY_VERSION') or 'IN-2025.1'
    PAYROLL_PF_RATE = os.environ.get('PAYROLL_PF_RATE') or '0.12'
    PAYROLL_PF_CEILING = os.environ.get('PAYROLL_PF_CEILING') or '1800'
    PAYROLL_ESI_RATE = os.environ.get('PAYROLL_ESI_RATE') or '0.0075'
    PAYROLL_ESI_GROSS_THRESHOLD = os.environ.get('PAYROLL_ESI_GROSS_THRESHOLD') or '25000'
    PAYROLL_PT_AMOUNT = os.environ.get('PAYROLL_PT_AMOUNT') or '200'
    PAYROLL_TDS_RATE = os.environ.get('PAYROLL_TDS_RATE') or '0.05'
    PAYROLL_TDS_ANNUAL_EXEMPTION = os.environ.get('PAYROLL_TDS_ANNUAL_EXEMPTION') or '250000'
    PAYROLL_STANDARD_HOURS_PER_DAY = os.environ.get('PAYROLL_STANDARD_HOURS_PER_DAY') or '8'
    PAYROLL_OVERTIME_MULTIPLIER = os.environ.get('PAYROLL_OVERTIME_MULTIPLIER') or '1.5'
    PAYROLL_MAX_OVERTIME_HOURS_PER_DAY = os.environ.get('PAYROLL_MAX_OVERTIME_HOURS_PER_DAY') or '12'
    PAYROLL_WEEKEND_DAYS = os.environ.get('PAYROLL_WEEKEND_DAYS') or '5,6'  # Saturday, Sunday
    PAYROLL_UNKNOWN_STATUS_POLICY = os.environ.get('PAYROLL_UNKNOWN_STATUS_POLICY') or 'TREAT_AS_ABSENT'

    # Logging
    LOG_TO_STDOUT = os.environ.get('LOG_TO_STDOUT')

    @staticmethod
    def init_app(app):
        """Initialize application-specific configuration."""
        import logging
        from logging import StreamHandler

        # Fail at startup rather than on the first payroll run
        from app.payroll.policy import PayrollPolicy
        PayrollPolicy.from_config(app.config)

        if not app.debug and not app.testing:
            if app.config.get('LOG_TO_STDOUT'):
                handler = StreamHandler()
            else:
                if not os.path.exists('logs'):
                    os.mkdir('logs')
                handler = logging.FileHandler('logs/payroll.log')
            handler.setFormatter(logging.Formatter(
                '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
            ))
            handler.setLevel(logging.INFO)
            app.logger.addHandler(handler)
            app.logger.setLevel(logging.INFO)
            app.logger.info('Payroll engine startup')

class DevelopmentConfig(Config):
    DEBUG = True

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    PAYROLL_POLICY_VERSION = 'test'

class ProductionConfig(Config):
    DEBUG = False
    # In production, these must be set via environment variables
    # Validation happens in init_app() method

    @staticmethod
    def init_app(app):
        """Initialize production configuration with validation."""
        Config.init_app(app)  # Call parent init_app for logging

        if not os.environ.get('SECRET_KEY'):
            raise ValueError("SECRET_KEY environment variable must be set in production!")

        if not os.environ.get('DATABASE_URL'):
            raise ValueError("DATABASE_URL environment variable must be set in production!")

        app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')
        app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL')

config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
