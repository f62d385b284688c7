# flarekit

A small, synchronous client for the Cloudflare v4 REST API.

It covers account management (accounts, roles, members), Access
applications and policies, audit logs, custom hostnames and custom pages.
Requests are rate limited. A request is retried with exponential backoff
when the server returns 429 or a 5xx status, or when the connection fails.

## Installation

```
pip install flarekit
```

To run the test suite:

```
pip install "flarekit[test]"
pytest
```

## Creating a client

Pick the constructor in `flarekit.client` that matches how you authenticate:

```python
from flarekit.client import new, new_with_api_token, new_with_user_service_key

api = new("placeholder", "someone@example.com")   # API key + e-mail
api = new_with_api_token("token")                  # API token, sent as "Bearer ..."
api = new_with_user_service_key("placeholder")     # user service key
```

An empty credential raises `ValueError`. Each constructor passes these
keyword arguments on to `API`, all optional:

- `base_url`
- `headers`: extra headers sent with every request
- `rate_limit`: requests per second, 4 by default
- `retry_policy`: a `RetryPolicy` (3 retries, delays from 1 to 30 seconds by default)
- `organization_id`
- `user_agent`
- `logger`: a `logging.Logger`; retries and error responses are logged at INFO
- `session`: a `requests.Session`

```python
from flarekit.client import RetryPolicy, new_with_api_token

api = new_with_api_token(
    "token",
    rate_limit=10,
    retry_policy=RetryPolicy(max_retries=5, min_retry_delay=0.5, max_retry_delay=10),
    user_agent="my-tool/1.0",
)
```

`API.set_auth_type` switches which credentials are sent, using the
`AuthType` flags `KEY_EMAIL`, `USER_SERVICE` and `TOKEN`.

A failed request raises `flarekit.client.APIError`, whose `status_code`
holds the HTTP status when there was one. The message says what went
wrong, for example `HTTP status 403: insufficient permissions`.

## Working with resources

Each area of the API has a service class that wraps a client. List calls
take an optional `PaginationOptions` and return the items together with a
`ResultInfo`.

```python
from flarekit.client import PaginationOptions
from flarekit.accounts import Accounts
from flarekit.account_roles import AccountRoles
from flarekit.account_members import AccountMembers

accounts, info = Accounts(api).list(PaginationOptions(page=1, per_page=20))
for account in accounts:
    print(account.id, account.name)

roles = AccountRoles(api).list(accounts[0].id)

members = AccountMembers(api)
member = members.create(accounts[0].id, "new-user@example.com", [roles[0].id])
```

`AccountMembers` methods raise `ValueError` when the account ID is empty.

### Access applications and policies

```python
from flarekit.access_application import AccessApplication, AccessApplications
from flarekit.access_policy import AccessPolicies, AccessPolicy, email_rule

apps = AccessApplications(api)
app = apps.create("<zone id>", AccessApplication(name="Admin", domain="example.com/admin"))

policies = AccessPolicies(api)
policies.create(
    "<zone id>",
    app.id,
    AccessPolicy(name="Allow devs", decision="allow", include=[email_rule("dev@example.com")]),
)
```

Other rule helpers are `email_domain_rule`, `ip_rule`, `everyone_rule` and
`group_rule`. `update` on either service raises `ValueError` when the
object has no ID.

### Audit logs

```python
from flarekit.auditlogs import AuditLogFilter, AuditLogs

logs = AuditLogs(api).user_logs(AuditLogFilter(actor_email="someone@example.com", per_page=50))
for entry in logs.result:
    print(entry.when, entry.action.type, entry.actor.email)
```

`AuditLogs.organization_logs` fetches an organization's logs; that
endpoint's body is expected as unpadded base64 and is decoded first.
`AuditLogFilter.query_string()` shows the query that will be sent.

### Custom hostnames and custom pages

```python
from flarekit.custom_hostname import CustomHostnames
from flarekit.custom_pages import CustomPageOptions, CustomPageParameters, CustomPages

hostname_id = CustomHostnames(api).id_by_name("<zone id>", "app.example.com")

pages = CustomPages(api)
pages.update(
    CustomPageOptions(zone_id="<zone id>"),
    "basic_challenge",
    CustomPageParameters(url="https://example.com/challenge", state="customized"),
)
```

`CustomHostnames.list` returns pages of 50. `id_by_name` raises
`LookupError` when no hostname matches. `CustomPageOptions` needs exactly
one of `account_id` and `zone_id`; otherwise `ValueError` is raised.

### Raw requests

Use `API.raw` for endpoints that have no wrapper. It returns the `result`
member of the response as decoded JSON:

```python
result = api.raw("GET", "/user")
```

## What this package does not do

- There is no command-line tool; everything is used from Python.
- There are no wrappers for zones, DNS records, firewall rules, page rules
  or Argo settings. Reach those endpoints through `API.raw`.
- `with_zone_filter` and `with_pagination` build request options that
  write into a parameter dict, but no service in this package consumes them.