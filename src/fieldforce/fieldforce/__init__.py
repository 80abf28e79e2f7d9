"""Field workforce management package.

Feature modules (users, sites, worksessions, requests, shifts, tasks, ...)
each carry a model, a repository protocol with its MySQL implementation,
a service and a thin Flask controller.
"""
