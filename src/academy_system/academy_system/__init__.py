"""Academy System package.

Feature modules (registration, courses, schedules, attendance, ...) each carry
a model, a repository protocol with its MySQL implementation, a service layer
and a thin Flask controller.
"""
