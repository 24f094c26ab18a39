# habits_bp.py
from dataclasses import asdict, replace
from datetime import MAXYEAR, MINYEAR

from flask import Blueprint, current_app, jsonify, request

from date_utils import current_month, format_for_display, is_valid_date, next_month, previous_month
from habit_registry import HabitSortType
from habit import ReminderTime
from errors import ValidationError

habits_bp = Blueprint("habits", __name__, url_prefix="/api")


def _manager():
    return current_app.extensions["habit_manager"]


def _habit_or_404(habit_id):
    habit = _manager().registry.get(habit_id)
    if habit is None:
        return None, (jsonify({"error": "Habit not found"}), 404)
    return habit, None


def _bad_date(date):
    if not is_valid_date(date):
        return jsonify({"error": f"Invalid date '{date}'. Use YYYY-MM-DD"}), 400
    return None


# ---------------- Habits ---------------- #
@habits_bp.route("/habits", methods=["GET"])
def list_habits():
    manager = _manager()
    habits = manager.registry.get_all() if request.args.get("all") else manager.registry.get_active()

    query = request.args.get("q")
    if query:
        wanted = {h.id for h in manager.registry.search(query)}
        habits = [h for h in habits if h.id in wanted]

    sort = request.args.get("sort")
    if sort:
        try:
            habits = manager.sort_habits(habits, HabitSortType(sort))
        except ValueError:
            return jsonify({"error": f"Unknown sort '{sort}'"}), 400

    return jsonify([h.to_dict() for h in habits])


@habits_bp.route("/habits", methods=["POST"])
def create_habit():
    data = request.get_json(silent=True) or {}
    reminder = None
    if data.get("reminderHour") is not None or data.get("reminderMinute") is not None:
        try:
            reminder = ReminderTime(data.get("reminderHour"), data.get("reminderMinute"))
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400

    habit, message = _manager().create_habit(
        data.get("name", ""), data.get("icon", ""), data.get("color", ""), reminder
    )
    if habit is None:
        return jsonify({"error": message}), 400
    return jsonify({"success": True, "habitId": habit.id, "habit": habit.to_dict()}), 201


@habits_bp.route("/habits/<habit_id>", methods=["PUT"])
def update_habit(habit_id):
    habit, err = _habit_or_404(habit_id)
    if err:
        return err

    data = request.get_json(silent=True) or {}
    changes = {k: data[k] for k in ("name", "icon", "color") if k in data}
    if "name" in changes and isinstance(changes["name"], str):
        changes["name"] = changes["name"].strip()
    ok, message = _manager().update_habit(replace(habit, **changes))
    if not ok:
        return jsonify({"error": message}), 400
    return jsonify({"success": True, "message": message})


@habits_bp.route("/habits/<habit_id>/deactivate", methods=["POST"])
def deactivate_habit(habit_id):
    ok, message = _manager().deactivate_habit(habit_id)
    if not ok:
        return jsonify({"error": message}), 404
    return jsonify({"success": True, "message": message})


@habits_bp.route("/habits/<habit_id>", methods=["DELETE"])
def delete_habit(habit_id):
    if not _manager().delete_completely(habit_id):
        return jsonify({"error": "Habit not found"}), 404
    return jsonify({"success": True})


# ---------------- Active habit ---------------- #
@habits_bp.route("/active-habit", methods=["GET"])
def get_active_habit():
    habit = _manager().registry.get_active_habit()
    return jsonify({"habit": habit.to_dict() if habit else None})


@habits_bp.route("/active-habit", methods=["PUT"])
def set_active_habit():
    data = request.get_json(silent=True) or {}
    ok, message = _manager().set_active_habit(data.get("habitId", ""))
    if not ok:
        return jsonify({"error": message}), 400
    return jsonify({"success": True, "message": message})


# ---------------- Reminders ---------------- #
@habits_bp.route("/habits/<habit_id>/reminder", methods=["PUT"])
def set_reminder(habit_id):
    data = request.get_json(silent=True) or {}
    ok, message = _manager().set_reminder(habit_id, data.get("hour"), data.get("minute"))
    if not ok:
        return jsonify({"error": message}), 400
    return jsonify({"success": True, "message": message})


@habits_bp.route("/habits/<habit_id>/reminder", methods=["DELETE"])
def clear_reminder(habit_id):
    ok, message = _manager().clear_reminder(habit_id)
    if not ok:
        return jsonify({"error": message}), 404
    return jsonify({"success": True, "message": message})


# ---------------- Day statuses ---------------- #
@habits_bp.route("/habits/<habit_id>/days/<date>", methods=["GET"])
def get_day(habit_id, date):
    err = _bad_date(date)
    if err:
        return err
    return jsonify({
        "date": date,
        "displayDate": format_for_display(date),
        "status": _manager().get_day_status(habit_id, date).value,
    })


@habits_bp.route("/habits/<habit_id>/days/<date>", methods=["PUT"])
def mark_day(habit_id, date):
    err = _bad_date(date)
    if err:
        return err
    _, err = _habit_or_404(habit_id)
    if err:
        return err

    data = request.get_json(silent=True) or {}
    success = data.get("success")
    if not isinstance(success, bool):
        return jsonify({"error": "'success' must be true or false"}), 400
    _manager().mark_day(habit_id, date, success)
    return jsonify({"success": True})


@habits_bp.route("/habits/<habit_id>/days/<date>", methods=["DELETE"])
def unmark_day(habit_id, date):
    err = _bad_date(date)
    if err:
        return err
    _manager().unmark_day(habit_id, date)
    return jsonify({"success": True})


@habits_bp.route("/habits/<habit_id>/months/current", methods=["GET"])
def current_month_view(habit_id):
    year, month = current_month()
    return month_view(habit_id, year, month)


@habits_bp.route("/habits/<habit_id>/months/<int:year>/<int:month>", methods=["GET"])
def month_view(habit_id, year, month):
    if not 1 <= month <= 12:
        return jsonify({"error": "Month must be 1-12"}), 400
    if not MINYEAR <= year <= MAXYEAR:
        return jsonify({"error": f"Year must be {MINYEAR}-{MAXYEAR}"}), 400

    manager = _manager()
    statuses = manager.day_store.get_statuses_in_month(habit_id, year, month)
    stats = manager.stats.get_month_stats(habit_id, year, month)
    return jsonify({
        "days": {date: status.value for date, status in statuses.items()},
        "stats": asdict(stats),
        "previous": list(previous_month(year, month)) if (year, month) != (MINYEAR, 1) else None,
        "next": list(next_month(year, month)) if (year, month) != (MAXYEAR, 12) else None,
    })


@habits_bp.route("/habits/<habit_id>/stats", methods=["GET"])
def habit_stats(habit_id):
    _, err = _habit_or_404(habit_id)
    if err:
        return err
    return jsonify(asdict(_manager().stats.get_habit_stats(habit_id)))


# ---------------- Resets ---------------- #
@habits_bp.route("/habits/<habit_id>/reset", methods=["POST"])
def reset_habit(habit_id):
    _, err = _habit_or_404(habit_id)
    if err:
        return err
    _manager().reset_habit_data(habit_id)
    return jsonify({"success": True})


@habits_bp.route("/reset", methods=["POST"])
def reset_all():
    _manager().reset_all_data()
    return jsonify({"success": True})


# ---------------- Export / import ---------------- #
@habits_bp.route("/export", methods=["GET"])
def export_habits():
    return current_app.response_class(
        _manager().registry.export_habits(), mimetype="application/json"
    )


@habits_bp.route("/import", methods=["POST"])
def import_habits():
    if not _manager().registry.import_habits(request.get_data(as_text=True)):
        return jsonify({"error": "Import failed: no valid habits found"}), 400
    return jsonify({"success": True})
