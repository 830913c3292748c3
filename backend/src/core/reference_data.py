"""
Default exercise reference data.

Arabic letters with their articulation points and short-vowel forms, and a
starter list of Libyan dialect words. Served as-is to specialists building
plans; each child's own library lives in its content record.
"""

def _vowels(letter: str) -> list[str]:
    return [letter + mark for mark in ("َ", "ِ", "ُ", "ْ")]


_LETTER_ARTICULATION = [
    ("ب", "الشفتان"),
    ("ت", "طرف اللسان مع أصول الثنايا العليا"),
    ("ث", "طرف اللسان مع أطراف الثنايا العليا"),
    ("ج", "وسط اللسان مع الحنك الصلب"),
    ("ح", "وسط الحلق"),
    ("خ", "أدنى الحلق"),
    ("د", "طرف اللسان مع أصول الثنايا العليا"),
    ("ذ", "طرف اللسان مع أطراف الثنايا العليا"),
    ("ر", "طرف اللسان مع اللثة العليا"),
    ("ز", "طرف اللسان مع اللثة العليا"),
    ("س", "طرف اللسان مع اللثة العليا"),
    ("ش", "وسط اللسان مع الحنك الصلب"),
    ("ص", "طرف اللسان مع اللثة العليا"),
    ("ض", "حافة اللسان مع الأضراس العليا"),
    ("ط", "طرف اللسان مع أصول الثنايا العليا"),
    ("ظ", "طرف اللسان مع أطراف الثنايا العليا"),
    ("ع", "وسط الحلق"),
    ("غ", "أدنى الحلق"),
    ("ف", "الشفة السفلى مع الثنايا العليا"),
    ("ق", "أقصى اللسان مع الحنك الرخو"),
    ("ك", "أقصى اللسان مع الحنك الرخو"),
    ("ل", "حافة اللسان مع اللثة العليا"),
    ("م", "الشفتان"),
    ("ن", "طرف اللسان مع اللثة العليا"),
    ("ه", "أقصى الحلق"),
    ("و", "الشفتان"),
    ("ي", "وسط اللسان مع الحنك الصلب"),
]

DEFAULT_LETTERS = [
    {"letter": letter, "articulationPoint": point, "vowels": _vowels(letter)}
    for letter, point in _LETTER_ARTICULATION
]

DEFAULT_WORDS = [
    # Emotions
    {"word": "فرحان", "translation": "Happy", "category": "emotions"},
    {"word": "حزين", "translation": "Sad", "category": "emotions"},
    {"word": "خايف", "translation": "Scared", "category": "emotions"},
    {"word": "زعلان", "translation": "Upset", "category": "emotions"},
    # Basic needs
    {"word": "جعان", "translation": "Hungry", "category": "needs"},
    {"word": "عطشان", "translation": "Thirsty", "category": "needs"},
    {"word": "نعسان", "translation": "Sleepy", "category": "needs"},
    {"word": "تعبان", "translation": "Tired", "category": "needs"},
    # Actions
    {"word": "ماشي", "translation": "Walking", "category": "actions"},
    {"word": "راكض", "translation": "Running", "category": "actions"},
    {"word": "قاعد", "translation": "Sitting", "category": "actions"},
    {"word": "واقف", "translation": "Standing", "category": "actions"},
    # Family
    {"word": "بابا", "translation": "Dad", "category": "family"},
    {"word": "ماما", "translation": "Mom", "category": "family"},
    {"word": "خويا", "translation": "Brother", "category": "family"},
    {"word": "ختي", "translation": "Sister", "category": "family"},
]
