"""HR Portal package.

Feature modules (users, attendance, breaks, requests, reviews) each carry a
model, a repository protocol with its MySQL implementation, a service and a
thin Flask controller.
"""
