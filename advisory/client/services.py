"""One wrapper per API area, each mirroring its endpoints one-to-one."""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Mapping

from advisory.core.logger import get_logger

from .http import ApiClient, get_api_client

LOGGER = get_logger(__name__)

JSON = dict[str, Any]


class _ApiService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api


class AuthService(_ApiService):
    """Login state lives on the shared :class:`TokenStore`."""

    def __init__(self, api: ApiClient) -> None:
        super().__init__(api)
        self.current_user: JSON | None = None

    def _remember(self, response: JSON) -> JSON:
        self.api.tokens.set(response["access_token"], response.get("refresh_token"))
        self.current_user = response.get("user")
        return response

    def register(self, email: str, password: str, first_name: str, last_name: str) -> JSON:
        response = self.api.post(
            "/auth/register",
            {"email": email, "password": password, "first_name": first_name, "last_name": last_name},
        )
        return self._remember(response)

    def login(self, email: str, password: str) -> JSON:
        response = self.api.post("/auth/login", {"email": email, "password": password})
        LOGGER.debug("Logged in", extra={"email": email})
        return self._remember(response)

    def logout(self) -> None:
        try:
            if self.api.tokens.is_authenticated:
                self.api.post("/auth/logout")
        finally:
            self.api.tokens.clear()
            self.current_user = None

    def refresh(self) -> JSON:
        refresh_token = self.api.tokens.refresh_token
        if not refresh_token:
            raise ValueError("No refresh token available")
        return self._remember(self.api.post("/auth/refresh", {"refresh_token": refresh_token}))

    def validate(self) -> JSON:
        return self.api.get("/auth/validate")

    def change_password(self, current_password: str, new_password: str) -> JSON:
        return self.api.post(
            "/auth/change-password",
            {"current_password": current_password, "new_password": new_password},
        )

    @property
    def is_authenticated(self) -> bool:
        return self.api.tokens.is_authenticated


class UserService(_ApiService):
    def get_current_user(self) -> JSON:
        return self.api.get("/users/me")

    def update_current_user(self, **changes: Any) -> JSON:
        return self.api.put("/users/me", changes)

    def update_password(self, current_password: str, new_password: str, confirm_password: str) -> JSON:
        return self.api.put(
            "/users/me/password",
            {
                "current_password": current_password,
                "new_password": new_password,
                "confirm_password": confirm_password,
            },
        )

    def search_users(self, query: str) -> list[JSON]:
        return self.api.get("/users/search", params={"q": query})

    def get_user(self, user_id: int) -> JSON:
        return self.api.get(f"/users/{user_id}")

    def list_users(self, page: int = 1, page_size: int = 20, search: str | None = None) -> JSON:
        return self.api.get("/users", params={"page": page, "page_size": page_size, "search": search})

    def delete_user(self, user_id: int) -> JSON:
        return self.api.delete(f"/users/{user_id}")

    def update_role(self, user_id: int, role: str) -> JSON:
        return self.api.put(f"/users/{user_id}/role", {"role": role})


class ClientService(_ApiService):
    def get_profile(self) -> JSON:
        return self.api.get("/clients/me")

    def get_portfolio(self) -> JSON:
        return self.api.get("/clients/me/portfolio")

    def update_preferences(self, preferences: Mapping[str, Any]) -> JSON:
        return self.api.put("/clients/me/preferences", dict(preferences))

    def get_investments(self) -> list[JSON]:
        return self.api.get("/clients/me/investments")

    def get_investment(self, investment_id: int) -> JSON:
        return self.api.get(f"/clients/me/investments/{investment_id}")

    def request_investment(
        self, stock_symbol: str, shares: Any, request_type: str = "BUY", notes: str | None = None
    ) -> JSON:
        payload = {"stock_symbol": stock_symbol, "shares": shares, "request_type": request_type}
        if notes is not None:
            payload["notes"] = notes
        return self.api.post("/clients/me/investment-requests", payload)

    def send_message(self, subject: str, content: str) -> JSON:
        return self.api.post("/clients/me/messages", {"subject": subject, "content": content})

    def get_messages(self) -> list[JSON]:
        return self.api.get("/clients/me/messages")

    def mark_message_read(self, message_id: int) -> JSON:
        return self.api.put(f"/clients/me/messages/{message_id}/read")

    def get_transactions(self, limit: int | None = None) -> list[JSON]:
        return self.api.get("/clients/me/transactions", params={"limit": limit})

    def get_performance(self, period: str | None = None) -> JSON:
        return self.api.get("/clients/me/performance", params={"period": period})


class EmployeeService(_ApiService):
    def get_profile(self) -> JSON:
        return self.api.get("/employees/me")

    def get_performance_metrics(self) -> JSON:
        return self.api.get("/employees/me/performance")

    def get_clients(self) -> list[JSON]:
        return self.api.get("/employees/me/clients")

    def search_clients(self, query: str) -> list[JSON]:
        return self.api.get("/employees/clients/search", params={"q": query})

    def get_client(self, client_id: int) -> JSON:
        return self.api.get(f"/employees/clients/{client_id}")

    def get_client_investments(self, client_id: int) -> list[JSON]:
        return self.api.get(f"/employees/clients/{client_id}/investments")

    def update_client_notes(self, client_id: int, notes: str) -> JSON:
        return self.api.put(f"/employees/clients/{client_id}/notes", {"notes": notes})

    def send_message_to_client(self, client_id: int, subject: str, content: str) -> JSON:
        return self.api.post(
            f"/employees/clients/{client_id}/messages", {"subject": subject, "content": content}
        )

    def get_messages(self) -> list[JSON]:
        return self.api.get("/employees/messages")

    def create_investment(self, payload: Mapping[str, Any]) -> JSON:
        return self.api.post("/employees/investments", dict(payload))

    def update_investment_status(self, investment_id: int, status: str) -> JSON:
        return self.api.put(f"/employees/investments/{investment_id}/status", {"status": status})

    def get_pending_investments(self) -> list[JSON]:
        return self.api.get("/employees/investments/pending")


class GuestService(_ApiService):
    def get_public_info(self) -> JSON:
        return self.api.get("/guests/info")

    def get_investment_options(self) -> list[JSON]:
        return self.api.get("/guests/investment-options")

    def calculate_returns(self, amount: Any, years: int) -> JSON:
        return self.api.post("/guests/calculate-returns", {"amount": amount, "years": years})

    def submit_contact(self, payload: Mapping[str, Any]) -> JSON:
        return self.api.post("/guests/contact", dict(payload))

    def get_profile(self) -> JSON:
        return self.api.get("/guests/me")

    def update_profile(self, **changes: Any) -> JSON:
        return self.api.put("/guests/me/profile", changes)

    def request_upgrade(self, payload: Mapping[str, Any]) -> JSON:
        return self.api.post("/guests/me/upgrade", dict(payload))

    def get_upgrade_request(self) -> JSON:
        return self.api.get("/guests/me/upgrade")

    def cancel_upgrade_request(self) -> JSON:
        return self.api.delete("/guests/me/upgrade")

    def check_eligibility(self) -> JSON:
        return self.api.get("/guests/me/upgrade/eligibility")


class InvestmentService(_ApiService):
    def list_investments(self) -> list[JSON]:
        return self.api.get("/investments")

    def list_by_status(self, status: str) -> list[JSON]:
        return self.api.get(f"/investments/status/{status}")

    def get_analytics(self) -> JSON:
        return self.api.get("/investments/analytics")

    def list_requiring_attention(self) -> list[JSON]:
        return self.api.get("/investments/attention")

    def refresh_prices(self) -> JSON:
        return self.api.post("/investments/refresh-prices")

    def get_investment(self, investment_id: int) -> JSON:
        return self.api.get(f"/investments/{investment_id}")

    def update_investment(self, investment_id: int, **changes: Any) -> JSON:
        return self.api.put(f"/investments/{investment_id}", changes)

    def get_performance(self, investment_id: int) -> JSON:
        return self.api.get(f"/investments/{investment_id}/performance")

    def record_dividend(self, investment_id: int, amount: Any) -> JSON:
        return self.api.post(f"/investments/{investment_id}/dividends", {"amount": amount})


class AdminService(_ApiService):
    def get_stats(self) -> JSON:
        return self.api.get("/admin/stats")

    def get_activity(self, limit: int | None = None) -> list[JSON]:
        return self.api.get("/admin/activity", params={"limit": limit})

    def get_role_distribution(self) -> dict[str, int]:
        return self.api.get("/admin/roles/distribution")

    def update_user_role(self, user_id: int, role: str) -> JSON:
        return self.api.put(f"/admin/users/{user_id}/role", {"role": role})

    def assign_permissions(self, user_id: int, permission_ids: list[int]) -> JSON:
        return self.api.post(f"/admin/users/{user_id}/permissions", {"permission_ids": permission_ids})

    def remove_permissions(self, user_id: int, permission_ids: list[int]) -> JSON:
        return self.api.delete(f"/admin/users/{user_id}/permissions", {"permission_ids": permission_ids})

    def bulk_operation(self, user_ids: list[int], operation: str) -> JSON:
        return self.api.post("/admin/users/bulk", {"user_ids": user_ids, "operation": operation})

    def reset_password(self, user_id: int) -> JSON:
        return self.api.post(f"/admin/users/{user_id}/reset-password")

    def enable_user(self, user_id: int) -> JSON:
        return self.api.put(f"/admin/users/{user_id}/enable")

    def disable_user(self, user_id: int) -> JSON:
        return self.api.put(f"/admin/users/{user_id}/disable")

    def get_config(self) -> JSON:
        return self.api.get("/admin/config")

    def update_config(self, **changes: Any) -> JSON:
        return self.api.put("/admin/config", changes)

    def toggle_maintenance(self, enabled: bool, message: str | None = None) -> JSON:
        return self.api.put("/admin/maintenance", {"enabled": enabled, "message": message})

    def create_employee(self, payload: Mapping[str, Any]) -> JSON:
        return self.api.post("/admin/employees", dict(payload))

    def assign_client(self, client_id: int, employee_id: int) -> JSON:
        return self.api.put(f"/admin/clients/{client_id}/assign", {"employee_id": employee_id})

    def get_pending_upgrade_requests(self) -> list[JSON]:
        return self.api.get("/admin/upgrade-requests/pending")

    def approve_upgrade_request(self, request_id: int) -> JSON:
        return self.api.put(f"/admin/upgrade-requests/{request_id}/approve")

    def reject_upgrade_request(self, request_id: int, reason: str | None = None) -> JSON:
        return self.api.put(f"/admin/upgrade-requests/{request_id}/reject", {"reason": reason})

    def list_templates(self, template_type: str | None = None, active_only: bool = False) -> list[JSON]:
        return self.api.get(
            "/admin/notification-templates", params={"type": template_type, "active_only": active_only}
        )

    def create_template(self, payload: Mapping[str, Any]) -> JSON:
        return self.api.post("/admin/notification-templates", dict(payload))

    def get_template(self, template_id: int) -> JSON:
        return self.api.get(f"/admin/notification-templates/{template_id}")

    def update_template(self, template_id: int, payload: Mapping[str, Any]) -> JSON:
        return self.api.put(f"/admin/notification-templates/{template_id}", dict(payload))

    def delete_template(self, template_id: int) -> JSON:
        return self.api.delete(f"/admin/notification-templates/{template_id}")

    def preview_template(self, template_id: int, values: Mapping[str, Any]) -> JSON:
        return self.api.post(
            f"/admin/notification-templates/{template_id}/preview", {"values": dict(values)}
        )


@lru_cache(maxsize=1)
def get_auth_service() -> AuthService:
    return AuthService(get_api_client())


@lru_cache(maxsize=1)
def get_user_service() -> UserService:
    return UserService(get_api_client())


@lru_cache(maxsize=1)
def get_client_service() -> ClientService:
    return ClientService(get_api_client())


@lru_cache(maxsize=1)
def get_employee_service() -> EmployeeService:
    return EmployeeService(get_api_client())


@lru_cache(maxsize=1)
def get_guest_service() -> GuestService:
    return GuestService(get_api_client())


@lru_cache(maxsize=1)
def get_investment_service() -> InvestmentService:
    return InvestmentService(get_api_client())


@lru_cache(maxsize=1)
def get_admin_service() -> AdminService:
    return AdminService(get_api_client())


__all__ = [
    "AdminService",
    "AuthService",
    "ClientService",
    "EmployeeService",
    "GuestService",
    "InvestmentService",
    "UserService",
    "get_admin_service",
    "get_auth_service",
    "get_client_service",
    "get_employee_service",
    "get_guest_service",
    "get_investment_service",
    "get_user_service",
]
