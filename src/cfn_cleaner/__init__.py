"""cfn-cleaner - bulk deletion of CloudFormation stacks"""
