"""Starter programs shown when a language is first selected."""

from __future__ import annotations

from codebench.models import LanguageId

DEFAULT_TEMPLATES: dict[LanguageId, str] = {
    LanguageId.PYTHON: """\
# Welcome to Codebench
def hello_world():
    print("Hello, World!")
    return "Welcome to Codebench"

# Write your code here and use AI assistance!
hello_world()
""",
    LanguageId.LUA: """\
-- Welcome to Codebench
local function hello_world()
  print("Hello, World!")
  return "Welcome to Codebench"
end

print(hello_world())
""",
    LanguageId.JAVASCRIPT: """\
// Welcome to Codebench
function helloWorld() {
    console.log("Hello, World!");
    return "Welcome to Codebench";
}

console.log(helloWorld());
""",
    LanguageId.JAVA: """\
// Welcome to Codebench
public class HelloWorld {
    public static void main(String[] args) {
        System.out.println("Hello, World!");
        System.out.println("Welcome to Codebench");
    }
}
""",
    LanguageId.CPP: """\
// Welcome to Codebench
#include <iostream>
using namespace std;

int main() {
    cout << "Hello, World!" << endl;
    cout << "Welcome to Codebench" << endl;
    return 0;
}
""",
    LanguageId.C: """\
/* Welcome to Codebench */
#include <stdio.h>

int main(void) {
    printf("Hello, World!\\n");
    printf("Welcome to Codebench\\n");
    return 0;
}
""",
    LanguageId.HTML: """\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Codebench</title>
</head>
<body>
    <h1>Welcome to Codebench</h1>
    <p>Write your HTML code here!</p>
</body>
</html>
""",
    LanguageId.CSS: """\
/* Welcome to Codebench */
body {
    font-family: Arial, sans-serif;
    margin: 0;
    padding: 20px;
    background-color: #f5f5f5;
}

h1 {
    color: #333;
    text-align: center;
}
""",
    LanguageId.JSON: """\
{
  "name": "Codebench",
  "version": "1.0.0",
  "description": "An intelligent coding environment",
  "features": [
    "Code generation",
    "Debugging assistance",
    "Code optimization",
    "Real-time AI help"
  ]
}
""",
    LanguageId.SQL: """\
-- Welcome to Codebench
CREATE TABLE users (
    id INT PRIMARY KEY AUTO_INCREMENT,
    name VARCHAR(100) NOT NULL,
    email VARCHAR(100) UNIQUE NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Write your SQL queries here!
SELECT * FROM users;
""",
}


def default_template(language: LanguageId | str) -> str:
    """Starter program for *language*; unknown languages get the Python one."""
    try:
        return DEFAULT_TEMPLATES[LanguageId.parse(language)]
    except ValueError:
        return DEFAULT_TEMPLATES[LanguageId.PYTHON]
