"""
Request-context defaults from environment.

Each tick runs as if it were a job for one tenant/user. The identifiers are
illustrative only; set WORKLOADSIM_TENANT_ID, WORKLOADSIM_USER_ID,
WORKLOADSIM_JOB_ID or WORKLOADSIM_CUSTOMER_ID to change them.
"""

import os

_DEMO_FIELDS = {
    "tenant_id": "1234",
    "user_id": "demo-user",
    "job_id": "job-9876",
    "customer_id": "DB93F282-5559-49B8-9BBB-F24E0086FE14",
}


def default_request_fields() -> dict[str, str]:
    """Correlation fields for the demo request context, env overriding the built-in values."""
    fields: dict[str, str] = {}
    for key, fallback in _DEMO_FIELDS.items():
        raw = os.environ.get(f"WORKLOADSIM_{key.upper()}", "").strip()
        fields[key] = raw or fallback
    return fields
