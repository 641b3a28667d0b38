from __future__ import annotations

"""Static sample questions per topic.

Used when no generative provider is configured or when it fails. Keyed by
topic display name.
"""

FALLBACK_QUESTIONS = {
    "Science & Nature": [
        {
            "id": "1",
            "question": "What is the chemical symbol for water?",
            "options": ["H2O", "CO2", "NaCl", "O2"],
            "correctAnswer": 0,
            "explanation": "Water is composed of two hydrogen atoms and one oxygen atom.",
        },
        {
            "id": "2",
            "question": "Which planet is closest to the Sun?",
            "options": ["Venus", "Earth", "Mercury", "Mars"],
            "correctAnswer": 2,
            "explanation": "Mercury is the innermost planet in our solar system.",
        },
    ],
    "History": [
        {
            "id": "1",
            "question": "In which year did the Berlin Wall fall?",
            "options": ["1987", "1989", "1991", "1993"],
            "correctAnswer": 1,
            "explanation": "The Berlin Wall fell on November 9, 1989.",
        },
    ],
    "Technology": [
        {
            "id": "1",
            "question": "Who founded Microsoft?",
            "options": ["Steve Jobs", "Bill Gates", "Mark Zuckerberg", "Larry Page"],
            "correctAnswer": 1,
            "explanation": "Bill Gates co-founded Microsoft with Paul Allen in 1975.",
        },
    ],
    "Sports": [
        {
            "id": "1",
            "question": "How many players are on a soccer team on the field at one time?",
            "options": ["9", "10", "11", "12"],
            "correctAnswer": 2,
            "explanation": "Each soccer team has 11 players on the field, including the goalkeeper.",
        },
    ],
}
