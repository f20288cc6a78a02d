"""Helpdesk support-ticket backend."""
