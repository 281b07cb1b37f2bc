from code_guardian.reports.issues import build_report
from code_guardian.reports.payloads import insight_request, webhook_payload

__all__ = ["build_report", "insight_request", "webhook_payload"]
