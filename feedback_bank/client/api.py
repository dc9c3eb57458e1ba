"""
Thin HTTP client for the feedback API.

Every call returns parsed schema objects; non-success responses raise
``FeedbackAPIError`` carrying the server's status code and message.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

import httpx

from feedback_bank.core.config import settings
from feedback_bank.models.schemas import ElementOut, ModuleOut, QuestionOut

logger = logging.getLogger(__name__)

class FeedbackAPIError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message

@dataclass(frozen=True)
class SiteLock:
    locked: bool
    lock_timestamp: Optional[str] = None

class FeedbackClient:
    def __init__(self, http: Optional[httpx.Client] = None, base_url: Optional[str] = None):
        self.http = http or httpx.Client(
            base_url=base_url or settings.CLIENT_BASE_URL, timeout=settings.CLIENT_TIMEOUT_SECONDS
        )

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        resp = self.http.request(method, path, json=body)
        try:
            data = resp.json()
        except ValueError:
            raise FeedbackAPIError(resp.status_code, resp.text or "Invalid response")
        if resp.status_code >= 400 or not data.get("success"):
            raise FeedbackAPIError(resp.status_code, data.get("message") or "Request failed")
        return data

    # ----- modules -----

    def list_modules(self) -> List[ModuleOut]:
        data = self._request("GET", "/feedback")
        return [ModuleOut.model_validate(m) for m in data["modules"]]

    def get_module(self, module_id: str) -> ModuleOut:
        return ModuleOut.model_validate(self._request("GET", f"/feedback/{module_id}")["module"])

    def create_module(self, title: str, description: Optional[str] = None) -> ModuleOut:
        data = self._request("POST", "/feedback", {"title": title, "description": description})
        return ModuleOut.model_validate(data["module"])

    def update_module(self, module_id: str, title: str, **fields: Any) -> ModuleOut:
        """``fields`` may carry ``description`` and/or ``position``; omitted ones stay as they are."""
        data = self._request("PUT", f"/feedback/{module_id}", {"title": title, **fields})
        return ModuleOut.model_validate(data["module"])

    def delete_module(self, module_id: str) -> str:
        return self._request("DELETE", f"/feedback/{module_id}")["message"]

    def reorder_modules(self, ordered_ids: List[str]) -> None:
        self._request("PATCH", "/feedback/modules/reorder", {"orderedIds": list(ordered_ids)})

    # ----- questions -----

    def list_questions(self, module_id: str) -> List[QuestionOut]:
        data = self._request("GET", f"/feedback/{module_id}/questions")
        return [QuestionOut.model_validate(q) for q in data["questions"]]

    def get_question(self, module_id: str, question_id: str) -> QuestionOut:
        data = self._request("GET", f"/feedback/{module_id}/questions/{question_id}")
        return QuestionOut.model_validate(data["question"])

    def create_question(self, module_id: str, title: str, description: Optional[str] = None) -> QuestionOut:
        data = self._request("POST", f"/feedback/{module_id}/questions", {"title": title, "description": description})
        return QuestionOut.model_validate(data["question"])

    def update_question(self, module_id: str, question_id: str, title: str, **fields: Any) -> QuestionOut:
        data = self._request("PUT", f"/feedback/{module_id}/questions/{question_id}", {"title": title, **fields})
        return QuestionOut.model_validate(data["question"])

    def delete_question(self, module_id: str, question_id: str) -> str:
        return self._request("DELETE", f"/feedback/{module_id}/questions/{question_id}")["message"]

    def reorder_questions(self, module_id: str, ordered_ids: List[str]) -> None:
        self._request("PATCH", f"/feedback/{module_id}/questions/reorder", {"orderedIds": list(ordered_ids)})

    # ----- elements -----

    @staticmethod
    def _element_path(module_id: str, question_id: Optional[str]) -> str:
        if question_id is None:
            return f"/feedback/{module_id}/elements"
        return f"/feedback/{module_id}/questions/{question_id}/elements"

    def create_element(self, module_id: str, content: str, question_id: Optional[str] = None) -> ElementOut:
        data = self._request("POST", self._element_path(module_id, question_id), {"content": content})
        return ElementOut.model_validate(data["element"])

    def get_element(self, module_id: str, element_id: str, question_id: Optional[str] = None) -> ElementOut:
        data = self._request("GET", f"{self._element_path(module_id, question_id)}/{element_id}")
        return ElementOut.model_validate(data["element"])

    def update_element(
        self, module_id: str, element_id: str, content: str,
        question_id: Optional[str] = None, position: Optional[int] = None,
    ) -> ElementOut:
        body: Dict[str, Any] = {"content": content}
        if position is not None:
            body["position"] = position
        data = self._request("PUT", f"{self._element_path(module_id, question_id)}/{element_id}", body)
        return ElementOut.model_validate(data["element"])

    def delete_element(self, module_id: str, element_id: str, question_id: Optional[str] = None) -> str:
        return self._request("DELETE", f"{self._element_path(module_id, question_id)}/{element_id}")["message"]

    def reorder_elements(
        self, ordered_ids: List[str], module_id: Optional[str] = None, question_id: Optional[str] = None
    ) -> None:
        body: Dict[str, Any] = {"orderedIds": list(ordered_ids)}
        if question_id is not None:
            body["questionId"] = question_id
        else:
            body["moduleId"] = module_id
        self._request("PATCH", "/feedback/elements/reorder", body)

    # ----- site settings -----

    def get_site_lock(self) -> SiteLock:
        data = self._request("GET", "/site-settings")
        return SiteLock(locked=bool(data["locked"]), lock_timestamp=data.get("lockTimestamp"))

    def set_site_lock(self, locked: bool) -> SiteLock:
        data = self._request("POST", "/site-settings", {"locked": locked})
        return SiteLock(locked=bool(data["locked"]), lock_timestamp=data.get("lockTimestamp"))
