"""
Shared test constants.

Urls of the fake tenant every test talks to. Nothing here is ever reached
over the network; respx intercepts all requests.
"""

HOST = "contoso.sharepoint.com"
SITE_URL = f"https://{HOST}/sites/dev"
API_WEB = f"{SITE_URL}/_api/web"

LOGIN_NAME = "i:0#.f|membership|jane@contoso.com"
