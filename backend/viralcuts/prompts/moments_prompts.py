"""
Prompts for viral moment detection.

Each time-bounded SRT chunk is sent separately; the model answers with a JSON
object of proposed cuts in the transcript's own (absolute) seconds.
"""

MOMENTS_SYSTEM_PROMPT = """You are a video editor specialised in retention for TikTok and Instagram Reels.
You output raw JSON only."""

MOMENTS_USER_PROMPT_TEMPLATE = """We are analysing PART {chunk_number} of {total_chunks} of a long transcript in SRT format.
Time range of this part: {start_time} to {end_time}

YOUR MISSION:
1. Find viral moments (cuts) with high engagement potential.
2. ONLY ONE THEME PER CUT.
3. MANDATORY criteria:
   - NARRATIVE ARC: beginning, middle and end.
   - NO EXTRA SILENCE: use the exact timestamps of the speech.
   - DURATION: {min_duration}s to {max_duration}s.
   - AVOID cuts that depend on earlier context not included here.

CRITICAL - TIMESTAMPS:
- "start" and "end" are in SECONDS from the beginning of the video
- Use the SRT timestamps of this part, converted to seconds

Return ONLY a valid JSON object with the cuts found.
Add a "score" field (0-100) based on perceived virality (strong hook, emotion, plot twist).

Example output:
{{
  "c1": {{"start": 10.5, "end": 60.2, "title": "The secret of success", "score": 95}},
  "c2": {{"start": 100.0, "end": 150.0, "title": "Common mistake", "score": 80}}
}}

Return {{}} if this part has no strong moment.

Transcript (excerpt):
{transcript}"""
