"""Scheduled digest, SLA and in-app notifications for a multi-tenant claims platform."""
