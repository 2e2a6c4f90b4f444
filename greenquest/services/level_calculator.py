"""Level calculation from cumulative progress."""


class LevelCalculator:
    """Maps (waste kg, completed reports, points earned) to a level."""

    # (level, waste_kg, reports, points), highest tier first
    LEVEL_THRESHOLDS = (
        (5, 500, 200, 5000),
        (4, 300, 100, 3000),
        (3, 150, 50, 1500),
        (2, 50, 20, 500),
    )
    BASE_LEVEL = 1

    @classmethod
    def calculate_level(cls, waste: float, reports: int, points: int) -> int:
        """Return the highest tier reached in any one dimension."""
        for level, min_waste, min_reports, min_points in cls.LEVEL_THRESHOLDS:
            if waste >= min_waste or reports >= min_reports or points >= min_points:
                return level
        return cls.BASE_LEVEL

    @classmethod
    def max_level(cls) -> int:
        return cls.LEVEL_THRESHOLDS[0][0]

    @classmethod
    def next_level_requirements(cls, level: int) -> dict | None:
        """Thresholds for the tier above ``level``; None at the top."""
        for tier, min_waste, min_reports, min_points in reversed(cls.LEVEL_THRESHOLDS):
            if tier > level:
                return {
                    "level": tier,
                    "waste_collected": min_waste,
                    "reports_submitted": min_reports,
                    "points_earned": min_points,
                }
        return None

    @classmethod
    def ladder(cls) -> list[dict]:
        """Full ladder, lowest tier first, for display."""
        tiers = [
            {
                "level": cls.BASE_LEVEL,
                "waste_collected": 0,
                "reports_submitted": 0,
                "points_earned": 0,
            }
        ]
        for level, min_waste, min_reports, min_points in reversed(cls.LEVEL_THRESHOLDS):
            tiers.append(
                {
                    "level": level,
                    "waste_collected": min_waste,
                    "reports_submitted": min_reports,
                    "points_earned": min_points,
                }
            )
        return tiers
