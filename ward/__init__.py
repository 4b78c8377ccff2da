"""Maternity ward coordination: patients, labor rooms, delivery SMS and the activity log."""
