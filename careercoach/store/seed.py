from __future__ import annotations

import hashlib
import logging

from careercoach.quiz.models import QuizQuestion
from careercoach.store.db import Store

logger = logging.getLogger(__name__)

# (category, difficulty, prompt, options, correct index, explanation, tags)
_SAMPLE_QUESTIONS: tuple[tuple[str, str, str, list[str], int, str, list[str]], ...] = (
    (
        "JavaScript", "Easy",
        "What is the correct way to declare a variable in JavaScript?",
        ["var x = 5;", "variable x = 5;", "v x = 5;", "declare x = 5;"], 0,
        "var, let, and const are the correct ways to declare variables in JavaScript.",
        ["variables", "syntax"],
    ),
    (
        "JavaScript", "Medium",
        'What does "this" keyword refer to in JavaScript?',
        ["The current function", "The global object", "The object that calls the function", "The parent object"], 2,
        'The "this" keyword refers to the object that calls the function.',
        ["scope", "functions"],
    ),
    (
        "JavaScript", "Easy",
        "Which method is used to add an element to the end of an array?",
        ["push()", "pop()", "shift()", "unshift()"], 0,
        "push() method adds elements to the end of an array.",
        ["arrays"],
    ),
    (
        "JavaScript", "Medium",
        "What is the difference between == and === in JavaScript?",
        ["No difference", "== checks type, === checks value", "=== checks both type and value", "== is faster"], 2,
        "=== checks both type and value (strict equality), while == only checks value.",
        ["equality", "types"],
    ),
    (
        "JavaScript", "Hard",
        "What is a closure in JavaScript?",
        ["A function inside another function", "A way to close a program", "A function that has access to outer scope", "A method to end loops"], 2,
        "A closure is a function that has access to variables in its outer (enclosing) scope.",
        ["closures", "scope"],
    ),
    (
        "React", "Easy",
        "What is JSX in React?",
        ["JavaScript XML", "Java Syntax Extension", "JSON XML", "JavaScript Extension"], 0,
        "JSX stands for JavaScript XML and allows you to write HTML in React.",
        ["jsx"],
    ),
    (
        "React", "Medium",
        "What is the purpose of useState hook?",
        ["To manage component state", "To handle side effects", "To optimize performance", "To create components"], 0,
        "useState hook is used to manage state in functional components.",
        ["hooks", "state"],
    ),
    (
        "React", "Medium",
        "What is the purpose of useEffect hook?",
        ["To manage state", "To handle side effects", "To create components", "To optimize rendering"], 1,
        "useEffect hook is used to handle side effects like API calls, subscriptions, etc.",
        ["hooks", "effects"],
    ),
    (
        "React", "Hard",
        "What is the Virtual DOM?",
        ["A copy of the real DOM", "A JavaScript representation of DOM", "A faster version of DOM", "A virtual reality DOM"], 1,
        "Virtual DOM is a JavaScript representation of the actual DOM kept in memory.",
        ["rendering"],
    ),
    (
        "Node.js", "Easy",
        "What is Node.js?",
        ["A JavaScript framework", "A JavaScript runtime environment", "A database", "A web browser"], 1,
        "Node.js is a JavaScript runtime environment that allows running JavaScript on the server.",
        ["runtime"],
    ),
    (
        "Node.js", "Hard",
        "What is the event loop in Node.js?",
        ["A loop that handles events", "A mechanism for non-blocking I/O", "A way to create loops", "A debugging tool"], 1,
        "The event loop is a mechanism that allows Node.js to perform non-blocking I/O operations.",
        ["event-loop", "async"],
    ),
    (
        "Python", "Easy",
        "What is the correct way to create a function in Python?",
        ["function myFunc():", "def myFunc():", "create myFunc():", "func myFunc():"], 1,
        'Functions in Python are defined using the "def" keyword.',
        ["functions", "syntax"],
    ),
    (
        "Python", "Medium",
        "What is a lambda function in Python?",
        ["A named function", "An anonymous function", "A class method", "A built-in function"], 1,
        "Lambda functions are anonymous functions defined with the lambda keyword.",
        ["functions"],
    ),
    (
        "Python", "Hard",
        "What is the difference between list and tuple?",
        ["No difference", "List is mutable, tuple is immutable", "Tuple is faster", "List uses more memory"], 1,
        "Lists are mutable (can be changed) while tuples are immutable (cannot be changed).",
        ["collections"],
    ),
    (
        "DSA", "Easy",
        "What is the time complexity of binary search?",
        ["O(n)", "O(log n)", "O(n²)", "O(1)"], 1,
        "Binary search divides the search space in half with each iteration, resulting in O(log n) time complexity.",
        ["algorithms", "search", "complexity"],
    ),
    (
        "DSA", "Medium",
        "Which data structure is best for implementing a LRU cache?",
        ["Array", "HashMap + Doubly Linked List", "Stack", "Queue"], 1,
        "HashMap provides O(1) access while doubly linked list allows O(1) insertion/deletion for LRU operations.",
        ["cache", "data-structures", "optimization"],
    ),
    (
        "DSA", "Hard",
        "What is the worst-case time complexity of QuickSort?",
        ["O(n log n)", "O(n²)", "O(n)", "O(log n)"], 1,
        "QuickSort has O(n²) worst-case time complexity when pivot is always the smallest or largest element.",
        ["sorting", "complexity"],
    ),
    (
        "MongoDB", "Easy",
        "What type of database is MongoDB?",
        ["Relational", "NoSQL Document", "Graph", "Key-Value"], 1,
        "MongoDB is a NoSQL document database that stores data in JSON-like documents.",
        ["databases"],
    ),
    (
        "MongoDB", "Medium",
        "Which method is used to insert a document in MongoDB?",
        ["insert()", "insertOne()", "add()", "create()"], 1,
        "insertOne() method is used to insert a single document in MongoDB.",
        ["crud"],
    ),
    (
        "Development", "Easy",
        "What does REST stand for?",
        ["Representational State Transfer", "Remote State Transfer", "Relational State Transfer", "Real State Transfer"], 0,
        "REST stands for Representational State Transfer, an architectural style for web services.",
        ["web", "api", "architecture"],
    ),
    (
        "Development", "Medium",
        "Which HTTP method is idempotent?",
        ["POST", "PUT", "PATCH", "All of the above"], 1,
        "PUT is idempotent - multiple identical requests have the same effect as a single request.",
        ["http", "web", "api"],
    ),
    (
        "AI", "Easy",
        "What is supervised learning?",
        ["Learning without labels", "Learning with input-output pairs", "Learning through rewards", "Learning by clustering"], 1,
        "Supervised learning uses labeled training data with input-output pairs to learn patterns.",
        ["machine-learning", "supervised", "training"],
    ),
    (
        "AI", "Medium",
        "What is overfitting in machine learning?",
        ["Model performs well on training data but poorly on test data", "Model performs poorly on both", "Model is too simple", "Model has too few parameters"], 0,
        "Overfitting occurs when a model learns the training data too well and fails to generalize.",
        ["machine-learning", "generalization"],
    ),
    (
        "Cloud", "Easy",
        "What does AWS EC2 stand for?",
        ["Elastic Compute Cloud", "Enhanced Cloud Computing", "Elastic Container Cloud", "Extended Compute Cluster"], 0,
        "EC2 stands for Elastic Compute Cloud, providing scalable computing capacity in AWS.",
        ["aws", "cloud", "compute"],
    ),
)


def _question_id(category: str, prompt: str) -> str:
    digest = hashlib.sha256(f"{category}|{prompt}".encode("utf-8")).hexdigest()
    return digest[:24]


def sample_questions() -> list[QuizQuestion]:
    return [
        QuizQuestion(
            id=_question_id(category, prompt),
            category=category,
            difficulty=difficulty,
            prompt=prompt,
            options=options,
            correct_option_index=correct,
            explanation=explanation,
            tags=tags,
        )
        for category, difficulty, prompt, options, correct, explanation, tags in _SAMPLE_QUESTIONS
    ]


def seed_quiz_data(store: Store) -> int:
    """Insert the sample question bank when the store has no questions yet."""
    existing = store.count_questions()
    if existing > 0:
        logger.info("quiz_seed_skipped existing=%s", existing)
        return 0
    inserted = store.insert_questions(sample_questions())
    logger.info("quiz_seed_completed inserted=%s", inserted)
    return inserted
