"""
Pytest configuration and fixtures for beyond-bridge tests.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src directory to Python path to allow importing beyond_bridge
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


class FakeClock:
    """Settable clock returning epoch milliseconds."""

    def __init__(self, start: float = 1_700_000_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_hours(self, hours: float) -> None:
        self.now += hours * 60 * 60 * 1000


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def import_time():
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fireball():
    """Bare spell definition with a saving throw and damage dice."""
    return {
        "id": 2618,
        "name": "Fireball",
        "level": 3,
        "school": "Evocation",
        "description": "<p>Each creature in a 20-foot-radius sphere must make a Dexterity saving throw. "
                       "A target takes 8d6 fire damage on a failed save, or half as much damage on a successful one.</p>",
        "higherLevelDescription": "The damage increases by 1d6 for each slot level above 3rd.",
        "requiresSavingThrow": True,
        "saveDcAbilityId": 2,
        "damageDice": [{"diceCount": 8, "diceValue": 6, "damageTypeId": 3}],
        "components": [1, 2, 3],
        "componentsDescription": "a tiny ball of bat guano and sulfur",
        "activation": {"activationTime": 1, "activationType": 1},
        "range": {"origin": "Ranged", "rangeValue": 150, "aoeType": "Sphere", "aoeValue": 20},
        "duration": {"durationInterval": 0, "durationType": "Instantaneous"},
        "sources": [{"sourceId": 2, "pageNumber": 241}],
    }


@pytest.fixture
def cure_wounds():
    return {
        "id": 2056,
        "name": "Cure Wounds",
        "level": 1,
        "school": "Evocation",
        "description": "<p>A creature you touch regains a number of hit points equal to 1d8 + your "
                       "spellcasting ability modifier.</p>",
        "healing": True,
        "healingDice": [{"diceCount": 1, "diceValue": 8}],
        "components": [1, 2],
        "activation": {"activationTime": 1, "activationType": 1},
        "range": {"origin": "Touch"},
        "duration": {"durationType": "Instantaneous"},
    }


@pytest.fixture
def longsword():
    return {
        "id": 1,
        "quantity": 1,
        "equipped": True,
        "isAttuned": False,
        "definition": {
            "id": 4,
            "name": "Longsword",
            "filterType": "Weapon",
            "type": "Longsword",
            "description": "<p>A versatile blade.</p>",
            "weight": 3,
            "cost": 15,
            "attackType": 1,
            "range": 5,
            "longRange": 5,
            "damage": {"diceCount": 1, "diceValue": 8, "diceString": "1d8"},
            "damageType": "Slashing",
            "properties": [{"name": "Versatile"}],
            "rarity": "Common",
            "magic": False,
        },
    }


@pytest.fixture
def fighter():
    return {
        "level": 11,
        "definition": {
            "id": 5,
            "name": "Fighter",
            "hitDie": 10,
            "description": "<p>Masters of martial combat.</p>",
            "canCastSpells": False,
            "savingThrows": [{"statId": 1}, {"statId": 3}],
            "classFeatures": [
                {"name": "Second Wind", "description": "<p>Regain 1d10 + level hit points.</p>", "requiredLevel": 1},
                {"name": "Extra Attack", "description": "<p>Attack twice.</p>", "requiredLevel": 5},
            ],
            "sources": [{"sourceId": 2, "pageNumber": 70}],
        },
        "subclassDefinition": {
            "name": "Champion",
            "classFeatures": [{"name": "Improved Critical", "requiredLevel": 3}],
        },
    }


@pytest.fixture
def goblin():
    return {
        "id": 16907,
        "name": "Goblin",
        "sizeId": 3,
        "typeId": 11,
        "alignmentId": 8,
        "armorClass": 15,
        "averageHitPoints": 7,
        "hitPointDice": {"diceCount": 2, "diceValue": 6, "fixedValue": 0, "diceString": "2d6"},
        "movements": [{"movementId": 1, "speed": 30}],
        "stats": [
            {"statId": 1, "value": 8},
            {"statId": 2, "value": 14},
            {"statId": 3, "value": 10},
            {"statId": 4, "value": 10},
            {"statId": 5, "value": 8},
            {"statId": 6, "value": 8},
        ],
        "skills": [{"skillId": 17, "value": 6}],
        "senses": [{"senseId": 2, "notes": "60 ft."}],
        "passivePerception": 9,
        "challengeRatingId": 3,
        "languageDescription": "Common, Goblin",
        "specialTraitsDescription": "<p><strong>Nimble Escape.</strong> The goblin can take the Disengage or Hide action.</p>",
        "actionsDescription": "<p><strong>Scimitar.</strong> Melee Weapon Attack: +4 to hit.</p>",
        "largeAvatarUrl": "https://www.dndbeyond.com/avatars/thumbnails/0/351/315/315/636252777818652432.jpeg",
        "sources": [{"sourceId": 5, "pageNumber": 166}],
    }


FIGHTER_PAGE = """
<div class="class-page">
  <table>
    <thead>
      <tr><th>Level</th><th>Proficiency Bonus</th><th>Features</th></tr>
    </thead>
    <tbody>
      <tr><td>1st</td><td>+2</td><td><a href="#FightingStyle">Fighting Style</a>, <a href="#SecondWind">Second Wind</a></td></tr>
      <tr><td>2nd</td><td>+2</td><td><a href="#ActionSurge">Action Surge</a></td></tr>
      <tr><td>5th</td><td>+3</td><td><a href="#ExtraAttack">Extra Attack</a></td></tr>
      <tr><td>11th</td><td>+4</td><td><a href="#ExtraAttack">Extra Attack</a> (2)</td></tr>
    </tbody>
  </table>
  <h2 id="FightingStyle">Fighting Style</h2>
  <p>You adopt a particular style of fighting as your specialty.</p>
  <h3 id="Archery">Archery</h3>
  <p>You gain a +2 bonus to attack rolls you make with ranged weapons.</p>
  <h3 id="Defense">Defense</h3>
  <p>While you are wearing armor, you gain a +1 bonus to AC.</p>
  <h2 id="SecondWind">Second Wind</h2>
  <p>You have a limited well of stamina that you can draw on.</p>
  <h2 id="ActionSurge">Action Surge</h2>
  <p>You can push yourself beyond your normal limits for a moment.</p>
  <ul><li>Once per short rest.</li></ul>
  <h2 id="ExtraAttack">Extra Attack</h2>
  <p>You can attack twice, instead of once, whenever you take the Attack action on your turn.</p>
</div>
"""


@pytest.fixture
def fighter_page():
    return FIGHTER_PAGE
