"""Static keyword tables used by the prompt validator."""

# Restriction -> food terms a request must not contain
DIETARY_CONFLICTS: dict[str, list[str]] = {
    "vegan": [
        "chicken",
        "beef",
        "pork",
        "lamb",
        "fish",
        "shrimp",
        "salmon",
        "tuna",
        "eggs",
        "milk",
        "cheese",
        "yogurt",
        "butter",
        "cream",
        "honey",
        "gelatin",
    ],
    "vegetarian": ["chicken", "beef", "pork", "lamb", "fish", "shrimp", "salmon", "tuna"],
    "gluten-free": ["wheat", "barley", "rye", "bread", "pasta", "flour", "soy sauce", "beer"],
    "dairy-free": ["milk", "cheese", "yogurt", "butter", "cream", "ice cream", "sour cream"],
    "keto": ["rice", "pasta", "bread", "potatoes", "sugar", "honey", "maple syrup"],
    "low-carb": ["rice", "pasta", "bread", "potatoes", "sugar", "honey", "maple syrup"],
    "paleo": ["grains", "legumes", "dairy", "processed foods", "refined sugar"],
}

_MEAT_SUBSTITUTES: dict[str, list[str]] = {
    "chicken": ["tofu", "tempeh", "seitan", "chickpeas", "lentils", "mushrooms"],
    "beef": ["portobello mushrooms", "jackfruit", "lentils", "black beans", "quinoa"],
    "fish": ["seaweed", "algae", "mushrooms", "tofu", "tempeh"],
}

_DAIRY_SUBSTITUTES: dict[str, list[str]] = {
    "milk": ["almond milk", "soy milk", "oat milk", "coconut milk", "cashew milk"],
    "cheese": [
        "nutritional yeast",
        "cashew cheese",
        "tofu ricotta",
        "dairy-free cheese alternatives",
    ],
}

# Restriction -> conflicting term -> substitutes, best first
DIETARY_ALTERNATIVES: dict[str, dict[str, list[str]]] = {
    "vegan": {
        **_MEAT_SUBSTITUTES,
        "eggs": ["flax seeds", "chia seeds", "banana", "applesauce", "silken tofu"],
        **_DAIRY_SUBSTITUTES,
    },
    "vegetarian": dict(_MEAT_SUBSTITUTES),
    "gluten-free": {
        "wheat": ["almond flour", "coconut flour", "rice flour", "quinoa flour", "tapioca flour"],
        "bread": ["gluten-free bread", "lettuce wraps", "collard green wraps", "coconut wraps"],
        "pasta": ["zucchini noodles", "spaghetti squash", "rice noodles", "quinoa pasta"],
        "soy sauce": ["tamari", "coconut aminos", "liquid aminos"],
    },
    "dairy-free": {
        **_DAIRY_SUBSTITUTES,
        "butter": ["coconut oil", "olive oil", "avocado oil", "dairy-free butter alternatives"],
        "cream": ["coconut cream", "cashew cream", "dairy-free cream alternatives"],
    },
}

# Checked in declaration order; the first cuisine with a matching keyword wins
CUISINE_KEYWORDS: dict[str, list[str]] = {
    "italian": ["pasta", "pizza", "risotto", "carbonara", "bolognese", "italian"],
    "asian": [
        "sushi",
        "stir fry",
        "curry",
        "noodles",
        "asian",
        "chinese",
        "japanese",
        "thai",
        "vietnamese",
    ],
    "mexican": ["tacos", "enchiladas", "quesadilla", "mexican", "salsa", "guacamole"],
    "indian": ["curry", "naan", "biryani", "indian", "masala", "dal"],
    "mediterranean": ["hummus", "falafel", "mediterranean", "greek", "lebanese"],
    "french": ["ratatouille", "coq au vin", "french", "béarnaise", "hollandaise"],
    "american": ["burger", "hot dog", "american", "bbq", "barbecue", "comfort food"],
}

# Skill level -> techniques and ingredients considered too demanding
COMPLEX_INGREDIENTS: dict[str, list[str]] = {
    "beginner": ["sous vide", "confit", "foie gras", "truffle", "quail", "duck", "lobster"],
    "intermediate": ["sous vide", "confit", "foie gras", "truffle"],
}

NO_RESTRICTION = "none"
