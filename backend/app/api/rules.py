# backend/app/api/rules.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from backend.app.store import get_rule_repository
from inbox_triage.rules.core import InvalidRuleError, RuleNotFoundError
from inbox_triage.rules.repository import RuleRepository

router = APIRouter()


@router.get("/rules")
def list_rules(repo: RuleRepository = Depends(get_rule_repository)) -> dict:
    return {"rules": [rule.to_dict() for rule in repo.list()]}


@router.post("/rules")
def create_rule(
    data: Dict[str, Any] = Body(...),
    repo: RuleRepository = Depends(get_rule_repository),
) -> dict:
    try:
        rule = repo.add(data)
    except InvalidRuleError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"success": True, "rule": rule.to_dict()}


@router.patch("/rules/{rule_id}")
def update_rule(
    rule_id: str,
    changes: Dict[str, Any] = Body(...),
    repo: RuleRepository = Depends(get_rule_repository),
) -> dict:
    try:
        rule = repo.update(rule_id, changes)
    except RuleNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Rule not found") from exc
    except InvalidRuleError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"success": True, "rule": rule.to_dict()}


@router.delete("/rules/{rule_id}")
def delete_rule(rule_id: str, repo: RuleRepository = Depends(get_rule_repository)) -> dict:
    try:
        repo.remove(rule_id)
    except RuleNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Rule not found") from exc
    return {"success": True}
