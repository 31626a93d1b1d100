"""Initial data seeding: default classes, subjects, exams and sample students."""

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from markshare.models.exam import Exam
from markshare.models.school_class import SchoolClass
from markshare.models.student import Student
from markshare.models.subject import Subject
from markshare.schemas.common import OperationResult

logger = logging.getLogger(__name__)

DEFAULT_CLASSES = [
    "Jr. KG",
    "Sr. KG",
    "1st Standard",
    "2nd Standard",
    "3rd Standard",
    "4th Standard",
    "5th Standard",
    "6th Standard",
    "7th Standard",
    "8th Standard",
    "9th Standard",
    "10th Standard",
]

DEFAULT_SUBJECTS = [
    "Math",
    "Science",
    "History",
    "English",
    "Marathi",
    "Hindi",
    "EVS",
    "G.Science",
    "SST",
    "Maths-1",
    "बुद्धिमत्ता चाचणी",
]

DEFAULT_EXAMS: list[tuple[str, int]] = [
    *((f"Monthly Test - {i}", 25) for i in range(1, 13)),
    *((f"Weekly Test - {i}", 10) for i in range(1, 41)),
    *((f"Class Test - {i}", 15) for i in range(1, 21)),
    *((f"Scholarship Test - {i}", 100) for i in range(1, 11)),
    ("Unit Test (20 Marks)", 20),
    ("Unit Test (25 Marks)", 25),
    ("Unit Test (40 Marks)", 40),
    ("Unit Test (50 Marks)", 50),
    ("Semester 1", 100),
    ("Semester 2", 100),
]

SAMPLE_STUDENTS = {
    "6th Standard": [
        "Aryan Patil", "Sneha Deshmukh", "Rahul Sharma", "Priya Joshi",
        "Aditya Kulkarni", "Neha Rane", "Rohit Shinde", "Kavya More",
        "Omkar Pawar", "Aditi Bhosale",
    ],
    "2nd Standard": [
        "Bhandage Arush Santosh", "Chaugule Rudra Sagar", "Chavan Shoam Babaso",
        "Jagdale Rajveer Anil", "Kadam Siddhant Sachin", "Kahrat Om",
        "Karmude Riyansh Jayram", "Khalage Atharv Atul", "Khalge Shlok Jitendra",
        "Kolawale Sumit Ankush", "Kolawale Tanmay Rahul", "Patil Samarth Vikas",
        "Pawar Viraj Vijay", "Rakshe Prathamesh", "Reddi Swaraj Siddheshwar",
        "Shaikh Ajan Naushad", "Shembade Priyansh Sitaram", "Thangal Shaurya Navanath",
        "Vibhute Ayush Vaibhav", "Vibhute Krishna Atul", "Vibhute Samarth Charan",
        "Vibhute Vishwajeet Rahul", "Yelpale Arav Ganesh", "Yelpale Arav Bharat",
        "Yelpale Kartik Ganesh", "Yelpale Samarth Vishal", "Yelpale Shardul Shankar",
        "Yelpale Swaraj Pramod", "Anuse Samiksha Anil", "Babar Mahi Sachin",
        "Chaugule Arushi Vaibhav", "Choramale Vaishnavi", "Chormale Arohi Subhash",
        "Chougule Ishani Nandkumar", "Kadam Sanvi Suraj", "Karande Shrushti Samadhan",
        "Khot Pradnya Shrishailya", "Kolawale Shravani Satish", "Kolwale Anchal Sadhu",
        "More Shraddha", "Shaikh Joya Amir", "Shembade Shreya Ankush",
        "Solase Ruhi Satish", "Lokare Jui Ravi", "Vibhute Pari Amol",
        "Vibhute Shreya Sagar", "Yelpale Arya Vishal", "Yelpale Namrata Datta",
        "Chavan Yash Dilip",
    ],
}


class SeedService:
    """Populates an empty database."""

    def __init__(self, db: Session):
        self.db = db

    def seed_initial_data(self) -> OperationResult:
        """Insert defaults in one savepoint. A non-empty classes table makes this a no-op."""
        existing = self.db.execute(select(func.count()).select_from(SchoolClass)).scalar_one()
        if existing:
            logger.info("Data already exists. Seeding not required.")
            return OperationResult.ok("Database already contains data.", seeded=False)

        logger.info("Seeding initial data...")
        try:
            with self.db.begin_nested():
                classes = {name: SchoolClass(name=name) for name in DEFAULT_CLASSES}
                self.db.add_all(classes.values())
                self.db.add_all(Subject(name=name) for name in DEFAULT_SUBJECTS)
                self.db.add_all(Exam(name=name, total_marks=total) for name, total in DEFAULT_EXAMS)
                self.db.flush()

                student_count = 0
                for class_name, names in SAMPLE_STUDENTS.items():
                    self.db.add_all(Student(name=name, class_id=classes[class_name].id) for name in names)
                    student_count += len(names)
                self.db.flush()
        except Exception as e:
            logger.exception("Error during initial data seeding")
            return OperationResult.fail(f"Failed to seed database: {e}")

        logger.info(
            f"Database seeded with {len(DEFAULT_CLASSES)} classes, {len(DEFAULT_SUBJECTS)} subjects, "
            f"{len(DEFAULT_EXAMS)} exams and {student_count} students"
        )
        return OperationResult.ok(
            "Database seeded successfully!",
            seeded=True,
            classes=len(DEFAULT_CLASSES),
            subjects=len(DEFAULT_SUBJECTS),
            exams=len(DEFAULT_EXAMS),
            students=student_count,
        )
