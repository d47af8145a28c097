"""Prompt templates for project analysis and per-phase development prompts."""

from typing import Dict, List

from promptplanner.models import ProjectAnalysis, PlanStep

WEB_APP = "web app"
GAME = "game"
TOOL = "tool"

PROJECT_TYPE_ALIASES = {
    "web": WEB_APP,
    "web app": WEB_APP,
    "webapp": WEB_APP,
    "web application": WEB_APP,
    "website": WEB_APP,
    "web应用": WEB_APP,
    "game": GAME,
    "games": GAME,
    "video game": GAME,
    "游戏": GAME,
    "tool": TOOL,
    "tools": TOOL,
    "tool app": TOOL,
    "utility": TOOL,
    "工具应用": TOOL,
}

ANALYSIS_PROMPT = """As an experienced software project planner and technical expert, analyze the following requirements and return the analysis as JSON.

Requirements: {user_input}

Return the following JSON structure (JSON only, no other text):
{{
  "projectType": "web app|game|tool",
  "projectName": "project name taken from the requirements",
  "complexity": "low|medium|high",
  "estimatedHours": "estimated development hours (number)",
  "mainFeatures": ["feature 1", "feature 2", "..."],
  "technicalChallenges": ["challenge 1", "challenge 2", "..."],
  "recommendedTech": ["technology 1", "technology 2", "..."],
  "developmentPhases": [
    {{
      "phase": "phase name",
      "description": "phase description",
      "tasks": ["task 1", "task 2", "..."],
      "estimatedHours": "estimated hours for this phase"
    }}
  ],
  "riskFactors": ["risk 1", "risk 2", "..."],
  "recommendations": ["recommendation 1", "recommendation 2", "..."],
  "successCriteria": ["criterion 1", "criterion 2", "..."]
}}"""


def build_analysis_prompt(user_input: str) -> str:
    """Build the prompt asking the model for a JSON project analysis."""
    return ANALYSIS_PROMPT.format(user_input=user_input.strip())


def normalize_project_type(project_type: str) -> str:
    """Map a model-supplied project type onto a template key; unknown types become web app."""
    key = " ".join((project_type or "").lower().split())
    return PROJECT_TYPE_ALIASES.get(key, WEB_APP)


def _bullets(items: List[str]) -> str:
    return "\n".join(f"- {item}" for item in items) or "- (none listed)"


def _inline(items: List[str]) -> str:
    return ", ".join(items) or "(none listed)"


# (id, title, step type, template) per project type
STEP_TEMPLATES = {
    WEB_APP: [
        ("setup", "Project foundation", "foundation",
         """Create a project called "{name}" with the following requirements:

Project type: {type}
Main features: {features}
Recommended tech stack: {tech}

Tasks:
1. Create the complete project file structure
2. Implement a responsive base layout
3. Set up the styling framework
4. Configure the base JavaScript architecture
5. Keep the code structure clear and easy to extend

Keep these technical challenges in mind: {challenges}

Output complete, runnable code."""),
        ("core", "Core features", "feature",
         """Now implement the core features of "{name}":

Feature modules:
{feature_list}

Requirements:
1. Implement all core business logic
2. Add the necessary user interactions
3. Make the features stable and reliable
4. Include appropriate error handling
5. Comment the code well

Technical notes:
{challenge_list}

Implement and test each feature module step by step."""),
        ("enhance", "User experience polish", "enhancement",
         """Improve the user experience of "{name}":

Goals:
1. Add smooth animations
2. Adapt the layout responsively
3. Optimize performance and load time
4. Add user feedback and hints
5. Support accessibility

Concrete improvements:
- Streamline interaction flows
- Add loading states and progress indicators
- Persist data where needed
- Add keyboard shortcuts
- Improve the mobile experience

Make sure the improvements do not affect the stability of existing features."""),
        ("finalize", "Finishing and deployment", "testing",
         """Finish the "{name}" project:

Final checklist:
1. Test every feature thoroughly
2. Fix any bugs found
3. Optimize code performance
4. Add complete documentation comments
5. Ensure browser compatibility
6. Prepare the deployment configuration

Acceptance criteria:
{criteria_list}

Provide the final version of the project and a deployment guide."""),
    ],
    GAME: [
        ("game_foundation", "Game engine architecture", "foundation",
         """Create the "{name}" game project:

Game type: {type}
Core gameplay: {features}
Tech stack: {tech}

Architecture requirements:
1. Set up the game loop and rendering system
2. Implement scene management
3. Create the base game object classes
4. Set up input handling
5. Configure a resource manager

Technical challenges: {challenges}

Build an extensible game architecture."""),
        ("game_mechanics", "Game mechanics", "feature",
         """Implement the core game mechanics of "{name}":

Core gameplay:
{feature_list}

Requirements:
1. Game rules and logic
2. Player controls
3. Physics and collision detection
4. Game state management
5. Scoring and progression

Notes:
{challenge_list}

Make sure the mechanics are balanced and fun."""),
        ("game_content", "Content and experience", "enhancement",
         """Enrich the game content of "{name}":

Content:
1. Sound effects and background music
2. Visual effects and animation
3. Level or content design
4. UI polish
5. Game balance tuning

Experience:
- Add a tutorial and help
- Add settings and configuration
- Optimize performance
- Add an achievement system
- Support different devices

Make the game more engaging and fun."""),
        ("game_polish", "Game polish", "testing",
         """Polish the "{name}" game:

Polish items:
1. Test all game features
2. Fix bugs and optimize performance
3. Balance the difficulty
4. Add save games
5. Refine the user interface

Acceptance criteria:
{criteria_list}

Make sure the game is stable and plays well."""),
    ],
    TOOL: [
        ("tool_architecture", "Tool architecture", "foundation",
         """Create the "{name}" tool:

Tool features: {features}
Technical requirements: {tech}

Architecture:
1. Design a clear user interface
2. Implement the data processing flow
3. Create the feature module structure
4. Set up input validation
5. Configure output formatting

Technical difficulties: {challenges}

Build a stable and reliable foundation for the tool."""),
        ("tool_functions", "Core functionality", "feature",
         """Develop the core functionality of "{name}":

Feature modules:
{feature_list}

Focus:
1. Implement the main algorithms
2. Handle the various input formats
3. Ensure correct results
4. Add error handling
5. Optimize processing efficiency

Technical points:
{challenge_list}

Make sure the tool works accurately and reliably."""),
        ("tool_experience", "User experience polish", "enhancement",
         """Improve the usability of "{name}":

Usability:
1. Simplify the workflow
2. Add usage guidance
3. Support batch processing
4. Support multiple formats
5. Provide result previews

Interface:
- Clear status messages
- Progress display
- Shortcuts
- Result export
- History

Make the tool easier and faster to use."""),
        ("tool_completion", "Tool completion", "testing",
         """Finish the "{name}" tool:

Completion:
1. Test all features
2. Handle edge cases
3. Optimize performance
4. Write user documentation
5. Prepare for deployment

Quality assurance:
{criteria_list}

Make sure the tool is stable, accurate and easy to use."""),
    ],
}


def _template_fields(analysis: ProjectAnalysis) -> Dict[str, str]:
    return {
        "name": analysis.project_name,
        "type": analysis.project_type or normalize_project_type(analysis.project_type),
        "features": _inline(analysis.main_features),
        "tech": _inline(analysis.recommended_tech),
        "challenges": _inline(analysis.technical_challenges),
        "feature_list": _bullets(analysis.main_features),
        "challenge_list": _bullets(analysis.technical_challenges),
        "criteria_list": _bullets(analysis.success_criteria),
    }


def generate_steps(analysis: ProjectAnalysis) -> List[PlanStep]:
    """Render the development-phase prompts for the analysed project type."""
    fields = _template_fields(analysis)
    templates = STEP_TEMPLATES[normalize_project_type(analysis.project_type)]
    return [
        PlanStep(id=step_id, title=title, type=step_type, prompt=template.format(**fields))
        for step_id, title, step_type, template in templates
    ]
