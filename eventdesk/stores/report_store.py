"""Report status/comment workflow.

Admins, organizers and attendees talk to the same report operations under
different URL prefixes. Nothing in this store is mutated optimistically:
after every successful write the report is re-fetched from the backend.
"""

from typing import List, Optional, Tuple

from eventdesk.api_client import TicketingApiClient
from eventdesk.errors import ApiError
from eventdesk.models import Report, Role
from eventdesk.stores.base import BaseStore
from eventdesk.validators import (
    validate_comment,
    validate_report_category,
    validate_report_description,
    validate_report_status,
)

REPORT_PREFIXES = {
    Role.ADMIN: "/api/admin/reports",
    Role.ORGANIZER: "/api/organizer/reports",
    Role.ATTENDEE: "/api/attendee/reports",
}


class ReportStore(BaseStore):
    """Holds the report list and the currently selected report for one role."""

    def __init__(self, client: TicketingApiClient, role: str):
        super().__init__(client)
        self.role = Role(role)
        self.prefix = REPORT_PREFIXES[self.role]
        self.reports: List[Report] = []
        self.selected_report: Optional[Report] = None

    @property
    def comment_error(self) -> Optional[str]:
        return self.field_errors.get("message")

    def _replace_in_list(self, report: Report) -> None:
        self.reports = [report if r.id == report.id else r for r in self.reports]

    def fetch_reports(
        self, status: Optional[str] = None
    ) -> Tuple[Optional[List[Report]], str]:
        """Fetch the role's report list, optionally narrowed to one status."""
        if status:
            is_valid, message = validate_report_status(status)
            if not is_valid:
                return None, self._reject("status", message)

        params = {"status": status} if status else None
        with self._request():
            try:
                data = self.client.get(self.prefix, params=params)
            except ApiError as e:
                self.reports = []
                return None, self._fail("Fetching reports", e)

        self.reports = (
            [Report.from_dict(item) for item in data] if isinstance(data, list) else []
        )
        self.logger.info(
            f"Fetched {len(self.reports)} reports as {self.role.value} (status filter: {status or 'ALL'})"
        )
        return self.reports, f"Found {len(self.reports)} reports"

    def fetch_report(self, report_id: str) -> Tuple[Optional[Report], str]:
        """Fetch one report. On failure the previously selected report is kept."""
        with self._request():
            try:
                data = self.client.get(f"{self.prefix}/{report_id}")
            except ApiError as e:
                return None, self._fail(f"Fetching report {report_id}", e)

        if not isinstance(data, dict):
            self.error = "Unexpected response while fetching report"
            self.logger.error(f"{self.error}: {data!r}")
            return None, self.error

        report = Report.from_dict(data)
        self.selected_report = report
        self._replace_in_list(report)
        self.logger.debug(
            f"Loaded report {report.id} ({report.status}, {len(report.comments)} comments)"
        )
        return report, "Report loaded"

    def _refresh_after_write(self, report_id: str, success_message: str) -> Tuple[bool, str]:
        report, message = self.fetch_report(report_id)
        if report is None:
            # The write itself was confirmed by the backend.
            return True, f"{success_message}, but reloading the report failed: {message}"
        return True, success_message

    def update_status(self, report_id: str, status: str) -> Tuple[bool, str]:
        """Set a report's status.

        Any status may be set from any other, including the current one; the
        request is always sent and the backend decides.
        """
        if self.role not in (Role.ADMIN, Role.ORGANIZER):
            return False, self._reject(
                "status", "Only admins and organizers can change a report's status"
            )
        is_valid, message = validate_report_status(status)
        if not is_valid:
            return False, self._reject("status", message)

        with self._request():
            try:
                self.client.patch(
                    f"{self.prefix}/{report_id}/status", params={"status": status}
                )
            except ApiError as e:
                return False, self._fail(f"Updating status of report {report_id}", e)

        self.logger.info(
            f"Report {report_id} status set to {status} by {self.role.value}"
        )
        return self._refresh_after_write(report_id, f"Report status updated to {status}")

    def add_comment(self, report_id: str, message: str) -> Tuple[bool, str]:
        """Post a comment, then reload the report to get the authoritative thread."""
        is_valid, error_message = validate_comment(message)
        if not is_valid:
            return False, self._reject("message", error_message)

        with self._request():
            try:
                self.client.post(
                    f"{self.prefix}/{report_id}/comments",
                    payload={"message": message.strip()},
                )
            except ApiError as e:
                return False, self._fail(f"Adding comment to report {report_id}", e)

        self.logger.info(f"Comment added to report {report_id} by {self.role.value}")
        return self._refresh_after_write(report_id, "Comment added")

    def delete_report(self, report_id: str, confirmed: bool = False) -> Tuple[bool, str]:
        """Irreversibly delete a report. Admin only, and only once confirmed."""
        if self.role != Role.ADMIN:
            return False, self._reject("report", "Only admins can delete reports")
        if not confirmed:
            return False, self._reject(
                "confirmation", "Deleting a report must be confirmed first"
            )

        with self._request():
            try:
                self.client.delete(f"{self.prefix}/{report_id}")
            except ApiError as e:
                return False, self._fail(f"Deleting report {report_id}", e)

        self.reports = [r for r in self.reports if r.id != str(report_id)]
        if self.selected_report is not None and self.selected_report.id == str(report_id):
            self.selected_report = None
        self.logger.info(f"Report {report_id} deleted")
        return True, "Report deleted"

    def create_report(
        self, category: str, description: str
    ) -> Tuple[Optional[Report], str]:
        """File a new report as an attendee, then reload the attendee's list."""
        if self.role != Role.ATTENDEE:
            return None, self._reject("report", "Only attendees can file reports")
        is_valid, message = validate_report_category(category)
        if not is_valid:
            return None, self._reject("category", message)
        is_valid, message = validate_report_description(description)
        if not is_valid:
            return None, self._reject("description", message)

        with self._request():
            try:
                data = self.client.post(
                    self.prefix,
                    payload={"category": category, "description": description.strip()},
                )
            except ApiError as e:
                return None, self._fail("Creating report", e)

        if isinstance(data, dict):
            report = Report.from_dict(data)
        else:
            report = Report(id="", category=category, description=description.strip())
        self.logger.info(
            f"Report created in category {category} (id: {report.id or 'unknown'})"
        )
        reports, message = self.fetch_reports()
        if reports is None:
            return report, f"Report submitted, but reloading reports failed: {message}"
        return report, "Report submitted"
