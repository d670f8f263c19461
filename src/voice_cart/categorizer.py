"""Item name to category lookup."""

from .item_normalizer import lookup_keys
from .models import Category

FALLBACK_CATEGORY = Category.OTHERS.value

_CATEGORY_ITEMS: dict[Category, list[str]] = {
    Category.FRUITS: [
        "apple",
        "banana",
        "orange",
        "mango",
        "grape",
        "pear",
        "peach",
        "plum",
        "kiwi",
        "lemon",
        "lime",
        "pineapple",
        "papaya",
        "guava",
        "watermelon",
        "melon",
        "strawberry",
        "blueberry",
        "raspberry",
        "cherry",
        "pomegranate",
        "lychee",
        "avocado",
        "fig",
    ],
    Category.VEGETABLES: [
        "tomato",
        "potato",
        "onion",
        "garlic",
        "ginger",
        "carrot",
        "cucumber",
        "lettuce",
        "spinach",
        "kale",
        "cabbage",
        "cauliflower",
        "broccoli",
        "pepper",
        "capsicum",
        "chili",
        "pea",
        "bean",
        "corn",
        "okra",
        "pumpkin",
        "beet",
        "radish",
        "celery",
        "mushroom",
        "eggplant",
        "zucchini",
        "coriander",
    ],
    Category.DAIRY: [
        "milk",
        "almond milk",
        "soy milk",
        "oat milk",
        "cheese",
        "paneer",
        "butter",
        "ghee",
        "yogurt",
        "curd",
        "cream",
        "egg",
    ],
    Category.BAKERY: [
        "bread",
        "bun",
        "bagel",
        "croissant",
        "muffin",
        "cake",
        "roll",
        "tortilla",
        "pita",
    ],
    Category.MEAT: [
        "chicken",
        "beef",
        "pork",
        "mutton",
        "lamb",
        "turkey",
        "bacon",
        "sausage",
        "ham",
        "fish",
        "salmon",
        "tuna",
        "shrimp",
        "prawn",
    ],
    Category.PANTRY: [
        "rice",
        "flour",
        "atta",
        "sugar",
        "salt",
        "oil",
        "olive oil",
        "pasta",
        "noodle",
        "lentil",
        "dal",
        "oats",
        "cereal",
        "honey",
        "jam",
        "peanut butter",
        "ketchup",
        "sauce",
        "vinegar",
        "spice",
        "jaggery",
        "quinoa",
    ],
    Category.SNACKS: [
        "chips",
        "cookies",
        "cookie",
        "biscuit",
        "chocolate",
        "candy",
        "popcorn",
        "nuts",
        "almond",
        "cracker",
        "pretzel",
    ],
    Category.BEVERAGES: [
        "water",
        "juice",
        "orange juice",
        "soda",
        "cola",
        "coffee",
        "tea",
        "beer",
        "wine",
    ],
    Category.FROZEN: [
        "ice cream",
        "frozen peas",
        "frozen pizza",
        "pizza",
    ],
    Category.HOUSEHOLD: [
        "detergent",
        "dish soap",
        "toilet paper",
        "tissue",
        "paper towel",
        "trash bag",
        "sponge",
        "bleach",
        "battery",
    ],
    Category.PERSONAL_CARE: [
        "soap",
        "shampoo",
        "conditioner",
        "toothpaste",
        "toothbrush",
        "deodorant",
        "lotion",
        "razor",
    ],
}

CATEGORY_TABLE: dict[str, str] = {
    name: category.value for category, names in _CATEGORY_ITEMS.items() for name in names
}


class Categorizer:
    """Static table categorizer with a fixed fallback label."""

    def __init__(
        self,
        fallback: str = FALLBACK_CATEGORY,
        extra: dict[str, str] | None = None,
    ):
        """Initialize categorizer.

        Args:
            fallback: Category returned when no table entry matches
            extra: Additional name -> category entries, taking precedence
        """
        self.fallback = fallback
        self.table = dict(CATEGORY_TABLE)
        for name, category in (extra or {}).items():
            self.table[name.strip().lower()] = category

    def categorize(self, name: str) -> str:
        """Return the category for an item name, or the fallback."""
        for key in lookup_keys(name):
            category = self.table.get(key)
            if category is not None:
                return category
        return self.fallback


_default_categorizer = Categorizer()


def categorize(name: str) -> str:
    """Categorize with the built-in table and "Others" fallback."""
    return _default_categorizer.categorize(name)
