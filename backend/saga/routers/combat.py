"""
Combat API routes.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from saga.combat import CombatEngine, CombatSession, CombatSessionNotFoundError
from saga.dependencies import get_combat_engine
from saga.models.combat_api import (
    ActivateFamiliarRequest,
    ClaimHuntRewardRequest,
    CreateCombatSessionRequest,
    EquipRequest,
    StartEncounterRequest,
    UnequipRequest,
    UseItemRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/combat", tags=["Combat"])


def _map_exception_to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, CombatSessionNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail=str(exc))
    logger.exception("combat route failed")
    return HTTPException(status_code=500, detail=str(exc))


def _session_view(engine: CombatEngine, session: CombatSession) -> Dict[str, Any]:
    return {
        "session_id": session.session_id,
        "state": session.state.value,
        "player": session.player.to_dict(),
        "effective_stats": engine.effective_stats(session.session_id).to_dict(),
        "active_combat": session.active_combat.to_dict() if session.active_combat else None,
        "characters": [c.to_dict() for c in session.characters],
        "inventory": [item.to_dict() for item in session.inventory.load_inventory()],
        "familiars": [f.to_dict() for f in session.familiars.list_familiars()],
    }


@router.post("/sessions")
async def create_session(
    payload: CreateCombatSessionRequest,
    engine: CombatEngine = Depends(get_combat_engine),
):
    """创建战斗会话"""
    try:
        session = engine.create_session(
            session_id=payload.session_id,
            player=payload.player.to_domain(),
            characters=[c.to_domain() for c in payload.characters],
            inventory=[item.to_domain() for item in payload.inventory],
            familiars=[f.to_domain() for f in payload.familiars],
        )
    except Exception as exc:
        raise _map_exception_to_http(exc) from exc
    engine.locations.names.update(payload.location_names)
    return _session_view(engine, session)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, engine: CombatEngine = Depends(get_combat_engine)):
    """获取会话"""
    try:
        return _session_view(engine, engine.get_session(session_id))
    except Exception as exc:
        raise _map_exception_to_http(exc) from exc


@router.post("/sessions/{session_id}/encounter")
async def start_encounter(
    session_id: str,
    payload: StartEncounterRequest,
    engine: CombatEngine = Depends(get_combat_engine),
):
    """开始战斗"""
    try:
        combat = engine.start_encounter(
            session_id,
            enemy_ids=payload.enemy_ids,
            ally_ids=payload.ally_ids,
            environment_description=payload.environment_description,
            contested_location_id=payload.contested_location_id,
            reward_items={cid: item.to_domain() for cid, item in payload.reward_items.items()},
        )
        return {"active_combat": combat.to_dict()}
    except Exception as exc:
        raise _map_exception_to_http(exc) from exc


@router.post("/sessions/{session_id}/turn")
async def play_turn(session_id: str, engine: CombatEngine = Depends(get_combat_engine)):
    """执行一个回合"""
    try:
        outcome = engine.play_turn(session_id)
        state = engine.get_session(session_id).state.value
    except Exception as exc:
        raise _map_exception_to_http(exc) from exc

    if outcome is None:
        return {"resolved": False, "state": state}
    return {
        "resolved": True,
        "state": state,
        "update": outcome.update.to_dict(),
        "notifications": [n.to_dict() for n in outcome.propagation.notifications],
        "familiar_leveled_up": outcome.propagation.familiar_leveled_up,
    }


@router.post("/sessions/{session_id}/hunt-reward")
async def claim_hunt_reward(
    session_id: str,
    payload: ClaimHuntRewardRequest,
    engine: CombatEngine = Depends(get_combat_engine),
):
    """领取狩猎奖励"""
    try:
        claim = engine.claim_hunt_reward(session_id, payload.combatant_id)
    except Exception as exc:
        raise _map_exception_to_http(exc) from exc

    if claim is None:
        return {"claimed": False}
    return {"claimed": True, "item": claim.item.to_dict(), "message": claim.message}


@router.post("/sessions/{session_id}/items/use")
async def use_item(
    session_id: str,
    payload: UseItemRequest,
    engine: CombatEngine = Depends(get_combat_engine),
):
    """使用消耗品"""
    try:
        outcome = engine.use_item(session_id, payload.item_id, target_id=payload.target_id)
    except Exception as exc:
        raise _map_exception_to_http(exc) from exc

    if outcome is None:
        return {"used": False}
    return {
        "used": True,
        "amount": outcome.amount,
        "message": outcome.message,
        "active_combat": outcome.active_combat.to_dict(),
    }


@router.post("/sessions/{session_id}/equip")
async def equip(
    session_id: str,
    payload: EquipRequest,
    engine: CombatEngine = Depends(get_combat_engine),
):
    """装备物品"""
    try:
        stats = engine.equip(session_id, payload.item_id)
        return {"effective_stats": stats.to_dict()}
    except Exception as exc:
        raise _map_exception_to_http(exc) from exc


@router.post("/sessions/{session_id}/unequip")
async def unequip(
    session_id: str,
    payload: UnequipRequest,
    engine: CombatEngine = Depends(get_combat_engine),
):
    """卸下装备"""
    try:
        stats = engine.unequip(session_id, payload.slot)
        return {"effective_stats": stats.to_dict()}
    except Exception as exc:
        raise _map_exception_to_http(exc) from exc


@router.post("/sessions/{session_id}/familiar")
async def activate_familiar(
    session_id: str,
    payload: ActivateFamiliarRequest,
    engine: CombatEngine = Depends(get_combat_engine),
):
    """切换出战魔宠"""
    try:
        stats = engine.activate_familiar(session_id, payload.familiar_id)
        return {"effective_stats": stats.to_dict()}
    except Exception as exc:
        raise _map_exception_to_http(exc) from exc


@router.post("/sessions/{session_id}/encounter/dismiss")
async def dismiss_pending_encounter(session_id: str, engine: CombatEngine = Depends(get_combat_engine)):
    """放弃未领取的狩猎奖励并结束战斗"""
    try:
        return {"dismissed": engine.dismiss_pending_encounter(session_id)}
    except Exception as exc:
        raise _map_exception_to_http(exc) from exc
