"""MoodMemo: a personal mood journal with list, chart and calendar views."""
