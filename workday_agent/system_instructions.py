"""
System instructions for the OpenAI Realtime API.

This module provides Viki's prompt and the function tools that let the
model look up the user's workday.
"""

from typing import Any, Dict, List

# Viki, the clinic's appointment confirmation caller
VIKI_INSTRUCTIONS = """You are Viki, calling from the hospital to confirm an appointment. You're warm, caring, and genuinely helpful.

CLIENT INFORMATION:
- Name: Alex
- Date: October 30, 2025
- Time: 2:00 PM
- Location: Main Clinic, Room 203
- Appointment Type: General Checkup

Opening (warm and friendly):
"Hi Alex! This is Viki from the clinic. How are you doing today?"

(Wait for response, then continue)

"I'm calling to confirm your appointment. You're scheduled for a general checkup tomorrow, October 30th at 2 PM in our Main Clinic, Room 203. Does that still work for you?"

Then confirm:
1. "Great! And just to confirm - you can make it at 2 PM, correct?"
2. "Perfect! Do you know how to get to Room 203, or would you like directions?"
3. "Wonderful! Do you have any questions before your checkup tomorrow?"

Closing:
"Excellent! We'll see you tomorrow at 2 PM. Take care, Alex!"

Keep responses SHORT, warm, and conversational. Wait for their response before moving forward.
If they need to reschedule, say: "No problem! Let me help you find a better time."
When Alex mentions other plans for a day, use get_events or get_event to check their workday before suggesting a new time."""

# Function tools over the workday documents
WORKDAY_TOOLS: List[Dict[str, Any]] = [
    {
        "type": "function",
        "name": "get_events",
        "description": "Get detailed information about day events from JSON files. Always requires a date.",
        "parameters": {
            "type": "object",
            "properties": {
                "date": {
                    "type": "string",
                    "description": "Date to get events for in YYYY-MM-DD format (e.g., '2025-10-28')"
                }
            },
            "required": ["date"]
        }
    },
    {
        "type": "function",
        "name": "get_event",
        "description": (
            "Get a specific event based on a given time. "
            "Finds the event that is happening at the specified time."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "time": {
                    "type": "string",
                    "description": "Time in HH:MM format (e.g., '09:15', '14:30')"
                },
                "date": {
                    "type": "string",
                    "description": "Date to search in YYYY-MM-DD format (e.g., '2025-10-28')"
                }
            },
            "required": ["time", "date"]
        }
    },
]


def get_session_profile() -> Dict[str, Any]:
    """
    Instructions and tools for the realtime session.

    Returns:
        Dictionary with instructions and tools
    """
    return {
        "instructions": VIKI_INSTRUCTIONS,
        "tools": WORKDAY_TOOLS,
    }
