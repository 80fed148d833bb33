"""
Execution configuration, read from the environment
"""

import os

_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Shared directory holding transient source files and compiled binaries
ARTIFACT_DIR = os.getenv('ARTIFACT_DIR', os.path.join(_BACKEND_DIR, 'sandbox'))
MAX_FILES = int(os.getenv('MAX_FILES', '5'))

# Size limits (bytes)
MAX_FILE_SIZE = int(os.getenv('MAX_FILE_SIZE', str(1 * 1024 * 1024)))
MAX_BODY_SIZE = int(os.getenv('MAX_BODY_SIZE', str(1 * 1024 * 1024)))
MAX_OUTPUT_BYTES = int(os.getenv('MAX_OUTPUT_BYTES', str(1 * 1024 * 1024)))

# Deadlines (milliseconds)
EXECUTION_TIMEOUT_MS = int(os.getenv('EXECUTION_TIMEOUT_MS', '5000'))
COMPILE_TIMEOUT_MS = int(os.getenv('COMPILE_TIMEOUT_MS', '10000'))

# Toolchain
PYTHON_BIN = os.getenv('PYTHON_BIN', 'python3')
CXX = os.getenv('CXX', 'g++')
CC = os.getenv('CC', 'gcc')
JAVAC = os.getenv('JAVAC', 'javac')
JAVA = os.getenv('JAVA', 'java')

# Server
HOST = os.getenv('HOST', '0.0.0.0')
PORT = int(os.getenv('PORT', '3001'))
CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', '*').split(',') if o.strip()]
