"""
Process-wide configuration.
Values come from environment variables, read once at import time.
"""

import os

# Minimum registered workers before a job may start
MIN_MAPPERS = int(os.getenv('MR_MIN_MAPPERS', '2'))
MIN_REDUCERS = int(os.getenv('MR_MIN_REDUCERS', '2'))

# Per-call timeout (seconds) for every /map and /reduce request
CALL_TIMEOUT = float(os.getenv('MR_CALL_TIMEOUT', '5'))

# Worker side: delay between registration attempts
REGISTER_RETRY_INTERVAL = float(os.getenv('MR_REGISTER_RETRY_INTERVAL', '5'))
COORDINATOR_URL = os.getenv('MR_COORDINATOR_URL', 'http://localhost:3000')

DEFAULT_COORDINATOR_PORT = 3000
DEFAULT_MAPPER_PORT = 3001
DEFAULT_REDUCER_PORT = 4001

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
