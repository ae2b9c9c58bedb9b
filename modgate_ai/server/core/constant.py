PROJECT_NAME = "ModGate-AI"
VERSION = "0.1.0"
SCHEMA_VERSION = "v1"
