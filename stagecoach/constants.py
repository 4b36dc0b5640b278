"""Shared constants for stagecoach."""

DEFAULT_POLL_INTERVAL_SECONDS = 30.0
DEFAULT_CONFIRMATION_URL = "http://localhost:8080/confirm"
DEFAULT_APPLICATION_NAME = "stagecoach"
DEFAULT_ENVIRONMENT_NAME = "DEV"
COMPLETION_MESSAGE = "Deployments complete"

APPROVE = "approve"
REJECT = "reject"
APPROVAL_ACTIONS = (APPROVE, REJECT)
