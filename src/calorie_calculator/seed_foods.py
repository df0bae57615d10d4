"""Default food catalogue shared by the device database and the remote table."""

from calorie_calculator.domain.models import Food

DEFAULT_FOODS: tuple[Food, ...] = (
    Food("food-001", "White rice (cooked)", 168, 2.5, 37.1, 0.3, "Staples"),
    Food("food-002", "Chicken breast (skinless)", 108, 22.3, 0, 1.5, "Protein"),
    Food("food-003", "Apple", 54, 0.2, 14.6, 0.1, "Fruit"),
    Food("food-004", "Broccoli", 33, 4.3, 5.2, 0.5, "Vegetables"),
    Food("food-005", "Salmon (sashimi)", 139, 20.1, 0.1, 6.2, "Protein"),
    Food("food-006", "Egg (whole)", 151, 12.3, 0.3, 10.3, "Protein"),
    Food("food-007", "Banana", 86, 1.1, 22.5, 0.2, "Fruit"),
    Food("food-008", "Almonds", 598, 18.6, 19.7, 54.2, "Nuts"),
    Food("food-009", "Plain yogurt", 62, 3.6, 4.9, 3.0, "Dairy"),
    Food("food-010", "Soba (boiled)", 132, 4.8, 26.0, 1.0, "Staples"),
    Food("food-011", "Sweet potato", 134, 1.2, 31.9, 0.2, "Vegetables"),
    Food("food-012", "Firm tofu", 72, 6.6, 1.6, 4.2, "Protein"),
    Food("food-013", "Spinach", 20, 2.2, 3.1, 0.4, "Vegetables"),
    Food("food-014", "Milk", 67, 3.3, 4.8, 3.8, "Dairy"),
    Food("food-015", "Oatmeal", 380, 13.7, 69.1, 5.7, "Staples"),
    Food("food-016", "Vegetable oil", 921, 0, 0, 100, "Seasonings"),
)
