"""Client library for the Cloudflare v4 REST API: accounts, Access, audit logs, custom hostnames and pages."""

__version__ = "0.1.0"