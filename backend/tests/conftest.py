import os

# Point the app at a throwaway database before club_activity.config is imported
os.environ["DATABASE_URL"] = "sqlite:///./test_club_activity.db"
