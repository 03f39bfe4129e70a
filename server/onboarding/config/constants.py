"""Business constants"""
from typing import Dict, List, Set, Tuple

# Report kinds (Business Configuration)
REPORT_KINDS: Tuple[str, ...] = ("learning", "attendance", "grooming", "interactions")

# Learning sub-sheets in declared order - earlier sheets win on conflicting values
LEARNING_SUB_SHEETS: Tuple[str, ...] = (
    "DailyQuizReports",
    "FortnightScores",
    "CourseExamScores",
    "OnlineDemoReports",
    "OfflineDemoReports",
)
COURSE_COMPLETION_KEY = "CourseCompletion"
SKILLS_KEY = "skills"

# Non-learning sheets accepted by the upload selector
ATTENDANCE_SHEET = "AttendanceReports"
GROOMING_SHEET = "GroomingReports"
INTERACTIONS_SHEET = "InteractionsReports"

SHEET_KINDS: Dict[str, str] = {
    **{sheet: "learning" for sheet in LEARNING_SUB_SHEETS},
    COURSE_COMPLETION_KEY: "learning",
    ATTENDANCE_SHEET: "attendance",
    GROOMING_SHEET: "grooming",
    INTERACTIONS_SHEET: "interactions",
}

# Month keys - JULY is spelled out in stored data
MONTH_ABBREVIATIONS: Tuple[str, ...] = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JULY", "AUG", "SEP", "OCT", "NOV", "DEC"
)
MONTH_FULL_NAMES: Tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December"
)

# Attendance report fields
TOTAL_WORKING_DAYS = "Total Working Days"
DAYS_ATTENDED = "No of days attended"
LEAVES_TAKEN = "No of leaves taken"
MONTHLY_PERCENTAGE = "Monthly Percentage"
ATTENDANCE_FIELDS: Tuple[str, ...] = (TOTAL_WORKING_DAYS, DAYS_ATTENDED, LEAVES_TAKEN, MONTHLY_PERCENTAGE)
MONTHLY_PERCENTAGE_VARIANTS: Tuple[str, ...] = (MONTHLY_PERCENTAGE, "Montly Percentage")

# Grooming report fields
GROOMING_MISSED_KEY = "How many times missed grooming check list"
DRESSCODE_NOT_FOLLOWED = "Dresscode NotFollowed"
DRESSCODE_FOLLOWED = "Dresscode Followed"

# Scoring header variants (historical spreadsheet headers)
DAILY_QUIZ_KEYS = ("Daily Quiz scores", "Daily Quiz Scores")
FORTNIGHT_KEYS = (
    "Fort night exam score Average (In Percentage)",
    "Fortnight Exam Score Average",
    "Fort night exam score Average",
)
COURSE_EXAM_KEYS = ("Course exam score", "Course Exam Score")
ONLINE_DEMO_COUNT_KEYS = ("Online demo counts", "Online Demo counts", "Online Demo Counts")
ONLINE_DEMO_RATING_KEYS = ("Online demo ratings Average", "Online Demo ratings Average", "Online Demo Ratings Average")
OFFLINE_DEMO_COUNT_KEYS = ("Offline demo counts", "Offline Demo counts", "Offline Demo Counts")
OFFLINE_DEMO_RATING_KEYS = ("Offline demo ratings Average", "Offline Demo ratings Average", "Offline Demo Ratings Average")
WEEKS_EXPECTED_FALLBACK = "No. of weeks expected complete the course"
COMPLETED_STATUSES: Set[str] = {"completed", "done", "finished"}

# Scoring weights
EXAM_WEIGHT = 0.6
ATTENDANCE_WEIGHT = 0.3
GROOMING_WEIGHT = 0.1
FAST_PHASE_THRESHOLD = 1.2
AVERAGE_PHASE_THRESHOLD = 0.8
LEARNING_PHASES: Tuple[str, ...] = ("fast", "average", "slow")
EXAM_TYPES: Tuple[str, ...] = ("dailyQuiz", "fortnightExam", "courseExam", "overall")

# Roles
ROLE_ADMIN = "admin"
ROLE_BOA = "boa"
ROLE_MASTER_TRAINER = "master_trainer"
ROLE_TRAINER = "trainer"
ROLE_TRAINEE = "trainee"
VALID_ROLES: Tuple[str, ...] = (ROLE_TRAINEE, ROLE_TRAINER, ROLE_MASTER_TRAINER, ROLE_BOA, ROLE_ADMIN)

# User admin
USER_UPDATABLE_FIELDS: Tuple[str, ...] = (
    "name", "email", "phone", "department", "state", "qualification", "specialization",
    "yearOfPassing", "yearOfPassout", "joiningDate", "dateOfJoining", "isActive"
)
USER_SECRET_FIELDS: Dict[str, int] = {"password": 0, "tempPassword": 0}
PENDING_ASSIGNMENT = "pending_assignment"

# Attendance
FULL_DAY_HOURS = 8
HALF_DAY_HOURS = 4
OVERTIME_HOURS = 10
ABSENT_DEFAULT_NOTE = "Marked as absent by trainer"

# Google Sheets export
USER_SHEET_HEADERS: List[str] = [
    "Name", "Email", "Employee ID", "Author ID", "Role", "Department", "Phone", "Status",
    "Is Active", "Account Status", "Joining Date", "Created At", "Updated At"
]
JOINER_SHEET_HEADERS: List[str] = [
    "Name", "Email", "Phone", "Employee ID", "Author ID", "Department", "Role", "Role Assign",
    "Joining Date", "Status", "Account Created", "Genre", "Qualification", "Created At", "Updated At"
]
REPORT_SHEET_HEADERS: List[str] = [
    "Author ID", "Name", "Email", "Report Data (JSON)", "Uploaded At", "Last Updated At"
]
REPORT_SHEET_NAMES: Dict[str, str] = {
    "learning": "Learning Reports",
    "attendance": "Attendance Reports",
    "grooming": "Grooming Reports",
    "interactions": "Interactions Reports",
}
USERS_SHEET_NAME = "Users"
JOINERS_SHEET_NAME = "Joiners"
