"""Points, rewards and redemption API endpoints."""

from flask import request

from greenquest.api import api_bp
from greenquest.services import LedgerService, RewardService
from greenquest.utils import result_response, success_response, validation_error
from greenquest.utils.auth import current_user, login_required


@api_bp.route("/balance", methods=["GET"])
@login_required
def get_balance():
    """Get the current user's point balance."""
    balance = LedgerService().get_balance(current_user().id)
    return success_response({"balance": balance})


@api_bp.route("/transactions", methods=["GET"])
@login_required
def get_transactions():
    """Recent ledger entries of the current user."""
    limit = min(int(request.args.get("limit", 10)), 100)
    transactions = LedgerService().get_reward_transactions(current_user().id, limit)
    return success_response({"transactions": transactions})


@api_bp.route("/rewards", methods=["GET"])
@login_required
def get_my_rewards():
    """Point grants of the current user."""
    rewards = RewardService().get_user_rewards(current_user().id)
    return success_response({"rewards": [r.to_dict() for r in rewards]})


@api_bp.route("/rewards/available", methods=["GET"])
@login_required
def get_available_rewards():
    """Balance entry (id 0) plus redeemable catalog items."""
    rewards = RewardService().get_available_rewards(current_user().id)
    return success_response({"rewards": rewards})


@api_bp.route("/rewards/redeem", methods=["POST"])
@login_required
def redeem_reward():
    """
    Redeem points.

    Request body:
    {
        "reward_id": 0   // 0 = redeem the whole balance, else a catalog id
    }
    """
    data = request.get_json(silent=True) or {}
    reward_id = data.get("reward_id")
    if not isinstance(reward_id, int) or isinstance(reward_id, bool) or reward_id < 0:
        return validation_error({"reward_id": "reward_id must be 0 or a catalog id"})

    result = RewardService().redeem_reward(current_user().id, reward_id)
    return result_response(result)
