LANDING_PAGE_JOB = {
    "title": "Build a landing page",
    "description": "Need a responsive landing page with hero section and contact form.",
    "budget": {"min": 100, "max": 500},
    "categories": ["Design"],
    "skillsRequired": ["HTML", "CSS"],
}
